"""
Auth helpers: Google sign-in through a popup, sign-out and state observers.

The popup itself belongs to the UI layer. It is handed to
GoogleAuthProvider as a callable that returns the Google OAuth credential
(an ``id_token`` and/or ``access_token``) or None when the user closes it.
The credential is exchanged for a Firebase session through the Identity
Toolkit REST API and the resulting ID token is verified with the Admin SDK.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

import requests
from firebase_admin import auth as firebase_auth

from classpoints.models import AuthUser
from core.errors import AuthError
from core.logger import logger

SIGN_IN_WITH_IDP_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithIdp"
GOOGLE_PROVIDER_ID = "google.com"
DEFAULT_REQUEST_URI = "http://localhost"
REQUEST_TIMEOUT_SECONDS = 30

AuthListener = Callable[[Optional[AuthUser]], None]
PopupHandler = Callable[["GoogleAuthProvider"], Optional[Dict[str, str]]]


class GoogleAuthProvider:
    """Google sign-in settings plus the UI hook that opens the popup."""

    provider_id = GOOGLE_PROVIDER_ID

    def __init__(self, popup: Optional[PopupHandler] = None, scopes: Optional[List[str]] = None,
                 custom_parameters: Optional[Dict[str, str]] = None):
        self.popup = popup
        self.scopes = list(scopes or [])
        self.custom_parameters = dict(custom_parameters or {})

    def add_scope(self, scope: str) -> "GoogleAuthProvider":
        if scope not in self.scopes:
            self.scopes.append(scope)
        return self

    def set_custom_parameters(self, params: Dict[str, str]) -> "GoogleAuthProvider":
        self.custom_parameters = dict(params)
        return self

    def open_popup(self) -> Dict[str, str]:
        """Run the popup and return the Google credential."""
        if self.popup is None:
            raise AuthError("auth/popup-blocked", "No popup handler configured for Google sign-in")
        credential = self.popup(self)
        if not credential:
            raise AuthError("auth/popup-closed-by-user", "The popup was closed before sign-in completed")
        if not credential.get("id_token") and not credential.get("access_token"):
            raise AuthError("auth/invalid-credential", "Popup returned no Google token")
        return credential


class FirebaseAuth:
    """Holds the current user for one Firebase app and notifies observers."""

    def __init__(self, app: Any, api_key: str = "", request_uri: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        self.app = app
        self.api_key = api_key
        self.request_uri = request_uri or DEFAULT_REQUEST_URI
        self.current_user: Optional[AuthUser] = None
        self._http = session or requests.Session()
        self._listeners: List[AuthListener] = []
        # Serializes listener dispatch and listener list changes
        self._lock = threading.RLock()

    def add_listener(self, listener: AuthListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)
            listener(self.current_user)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _set_user(self, user: Optional[AuthUser]) -> None:
        with self._lock:
            self.current_user = user
            for listener in list(self._listeners):
                listener(user)

    def _exchange_credential(self, provider: GoogleAuthProvider, credential: Dict[str, str]) -> Dict[str, Any]:
        if not self.api_key:
            raise AuthError("auth/invalid-api-key", "Firebase API key is not configured")

        post_body = {"providerId": provider.provider_id}
        if credential.get("id_token"):
            post_body["id_token"] = credential["id_token"]
        if credential.get("access_token"):
            post_body["access_token"] = credential["access_token"]

        try:
            resp = self._http.post(
                SIGN_IN_WITH_IDP_URL,
                params={"key": self.api_key},
                json={
                    "postBody": urlencode(post_body),
                    "requestUri": self.request_uri,
                    "returnSecureToken": True,
                    "returnIdpCredential": True,
                },
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            raise AuthError("auth/network-request-failed", str(exc)) from exc

        if resp.status_code != 200:
            try:
                message = resp.json().get("error", {}).get("message", resp.text)
            except ValueError:
                message = resp.text
            raise AuthError("auth/invalid-credential", message)
        return resp.json()

    def sign_in_with_popup(self, provider: GoogleAuthProvider) -> AuthUser:
        credential = provider.open_popup()
        data = self._exchange_credential(provider, credential)

        id_token = data.get("idToken")
        if not id_token:
            raise AuthError("auth/invalid-credential", "Sign-in response had no ID token")
        claims = firebase_auth.verify_id_token(id_token, app=self.app)

        user = AuthUser(
            uid=claims["uid"],
            email=claims.get("email") or data.get("email"),
            display_name=claims.get("name") or data.get("displayName"),
            id_token=id_token,
            refresh_token=data.get("refreshToken"),
        )
        logger.info(f"Signed in as {user.email or user.uid}")
        self._set_user(user)
        return user

    def sign_out(self) -> None:
        if self.current_user is None:
            return
        logger.info(f"Signed out {self.current_user.email or self.current_user.uid}")
        self._set_user(None)


def is_signed_in(auth: Any) -> bool:
    return auth.current_user is not None


def observe_auth(auth: Any, on_change: AuthListener) -> Callable[[], None]:
    """Call once; on_change runs now and whenever the user signs in/out."""
    return auth.add_listener(on_change)


def sign_in_with_google(auth: Any, provider: GoogleAuthProvider) -> AuthUser:
    """Open the Google popup and sign in; raises AuthError on cancel/block/network failure."""
    return auth.sign_in_with_popup(provider)


def sign_out_user(auth: Any) -> None:
    auth.sign_out()
