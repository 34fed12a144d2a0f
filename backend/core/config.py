"""
Configuration for the Firebase project backing the points tracker.

Values come from the environment, optionally seeded from a `.env` file in
the backend directory or the repository root (python-dotenv).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from core.logger import logger

DEFAULT_APP_NAME = "classroom-points"


@dataclass
class FirebaseConfig:
    """Connection settings for Firebase (web keys plus Admin credentials)."""

    api_key: str = ""
    project_id: str = ""
    auth_domain: str = ""
    origin: str = ""
    service_account_path: Optional[str] = None
    service_account_base64: Optional[str] = None
    app_name: str = DEFAULT_APP_NAME

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FirebaseConfig":
        """
        Build a config from a dict.

        Accepts both snake_case keys and the camelCase keys used by the
        Firebase web console snippet (apiKey, projectId, authDomain).
        """
        def pick(*keys: str, default: Any = "") -> Any:
            for key in keys:
                if data.get(key):
                    return data[key]
            return default

        return cls(
            api_key=pick("api_key", "apiKey"),
            project_id=pick("project_id", "projectId"),
            auth_domain=pick("auth_domain", "authDomain"),
            origin=pick("origin"),
            service_account_path=pick("service_account_path", "serviceAccountPath", default=None),
            service_account_base64=pick("service_account_base64", "serviceAccountBase64", default=None),
            app_name=pick("app_name", "appName", default=DEFAULT_APP_NAME),
        )


def load_env_files() -> None:
    """Load .env from the backend directory, then from the repository root."""
    backend_dir = Path(__file__).parent.parent
    env_path = backend_dir / '.env'
    root_env_path = backend_dir.parent / '.env'

    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
        logger.info(f"Loaded environment from {env_path}")
    if root_env_path.exists():
        load_dotenv(dotenv_path=root_env_path)
        logger.info(f"Loaded environment from {root_env_path}")
    if not env_path.exists() and not root_env_path.exists():
        # In production the environment is set directly
        load_dotenv()


def load_config() -> FirebaseConfig:
    """Read FirebaseConfig from the environment."""
    load_env_files()

    config = FirebaseConfig(
        api_key=os.getenv('FIREBASE_API_KEY', ''),
        project_id=os.getenv('FIREBASE_PROJECT_ID', ''),
        auth_domain=os.getenv('FIREBASE_AUTH_DOMAIN', ''),
        origin=os.getenv('APP_ORIGIN', ''),
        service_account_path=os.getenv('FIREBASE_SERVICE_ACCOUNT_PATH') or None,
        service_account_base64=os.getenv('FIREBASE_SERVICE_ACCOUNT_BASE64') or None,
        app_name=os.getenv('FIREBASE_APP_NAME', DEFAULT_APP_NAME),
    )

    if not config.api_key:
        logger.warning("FIREBASE_API_KEY not set. Google sign-in will not work.")
    return config
