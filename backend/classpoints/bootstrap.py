"""
Firebase bootstrap: app, Firestore client, auth session and Google provider.
"""

from __future__ import annotations

import base64
import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse

import firebase_admin
from firebase_admin import credentials, firestore

from classpoints.session import FirebaseAuth, GoogleAuthProvider
from core.config import FirebaseConfig
from core.logger import logger


@dataclass
class FirebaseContext:
    """Handles shared by every data helper."""

    app: Any
    db: Any
    auth: Any
    provider: Any


def _load_credentials(config: FirebaseConfig) -> Optional[credentials.Base]:
    """
    Resolve service-account credentials.

    Order: explicit path, then base64 (or raw JSON, or a path mistakenly
    put in the base64 setting), then None so the caller can fall back to
    application default credentials.
    """
    path = config.service_account_path
    if path and os.path.exists(path):
        return credentials.Certificate(path)

    content = config.service_account_base64
    if content:
        # Check if it looks like a path
        if content.endswith('.json') and os.path.exists(content):
            return credentials.Certificate(content)

        # Check if it looks like raw JSON (pasted directly)
        if content.strip().startswith('{'):
            try:
                return credentials.Certificate(json.loads(content))
            except ValueError as e:
                logger.warning(f"Failed to parse service account as raw JSON: {type(e).__name__}")

        try:
            # Add padding if missing
            missing_padding = len(content) % 4
            if missing_padding:
                content += '=' * (4 - missing_padding)
            return credentials.Certificate(json.loads(base64.b64decode(content)))
        except ValueError as e:
            logger.warning(f"Failed to decode service account base64: {type(e).__name__}")

    return None


def _get_or_create_app(config: FirebaseConfig):
    try:
        return firebase_admin.get_app(config.app_name)
    except ValueError:
        pass

    options: Dict[str, Any] = {}
    if config.project_id:
        options["projectId"] = config.project_id

    cred = _load_credentials(config)
    if cred is None:
        logger.warning("No service account credentials found; using application default credentials")
        cred = credentials.ApplicationDefault()

    app = firebase_admin.initialize_app(cred, options=options or None, name=config.app_name)
    logger.info(f"Firebase app '{config.app_name}' initialized")
    return app


def init_firebase(config: Union[FirebaseConfig, Dict[str, Any]]) -> FirebaseContext:
    """
    Build the Firebase handles from configuration.

    No network call is made here; the Firestore client connects lazily.
    """
    if not isinstance(config, FirebaseConfig):
        config = FirebaseConfig.from_dict(config)

    if config.origin and urlparse(config.origin).scheme == "file":
        logger.warning("Serve over http(s). Google sign-in may fail on file://")

    app = _get_or_create_app(config)
    db = firestore.client(app)
    auth = FirebaseAuth(app, api_key=config.api_key, request_uri=config.origin or None)
    provider = GoogleAuthProvider()
    return FirebaseContext(app=app, db=db, auth=auth, provider=provider)
