"""Tests for Firebase bootstrap and configuration loading."""

import base64
import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from classpoints.bootstrap import FirebaseContext, _load_credentials, init_firebase
from classpoints.session import FirebaseAuth, GoogleAuthProvider
from core.config import FirebaseConfig, load_config

pytestmark = pytest.mark.unit


@pytest.fixture
def firebase():
    """Patch the Admin SDK entry points used by init_firebase."""
    with patch("classpoints.bootstrap.firebase_admin.get_app", side_effect=ValueError("no app")) as get_app, \
            patch("classpoints.bootstrap.firebase_admin.initialize_app") as initialize_app, \
            patch("classpoints.bootstrap.firestore.client") as client, \
            patch("classpoints.bootstrap.credentials.ApplicationDefault") as adc:
        initialize_app.return_value = MagicMock(name="app")
        client.return_value = MagicMock(name="db")
        yield {"get_app": get_app, "initialize_app": initialize_app, "client": client, "adc": adc}


class TestInitFirebase:
    def test_builds_context(self, firebase):
        ctx = init_firebase({"apiKey": "k", "projectId": "points-demo", "origin": "https://points.example"})

        assert isinstance(ctx, FirebaseContext)
        assert ctx.app is firebase["initialize_app"].return_value
        assert ctx.db is firebase["client"].return_value
        assert isinstance(ctx.auth, FirebaseAuth)
        assert ctx.auth.api_key == "k"
        assert ctx.auth.request_uri == "https://points.example"
        assert isinstance(ctx.provider, GoogleAuthProvider)

        args, kwargs = firebase["initialize_app"].call_args
        assert args[0] is firebase["adc"].return_value
        assert kwargs["options"] == {"projectId": "points-demo"}
        assert kwargs["name"] == "classroom-points"

    def test_reuses_existing_app(self, firebase):
        existing = MagicMock(name="existing")
        firebase["get_app"].side_effect = None
        firebase["get_app"].return_value = existing

        ctx = init_firebase(FirebaseConfig(api_key="k"))

        assert ctx.app is existing
        firebase["initialize_app"].assert_not_called()

    def test_warns_on_file_origin(self, firebase, caplog):
        with caplog.at_level(logging.WARNING, logger="classroom_points"):
            init_firebase({"apiKey": "k", "origin": "file:///home/teacher/index.html"})
        assert "Serve over http(s)" in caplog.text

    def test_no_warning_on_http_origin(self, firebase, caplog):
        with caplog.at_level(logging.WARNING, logger="classroom_points"):
            init_firebase({"apiKey": "k", "origin": "http://localhost:5173"})
        assert "Serve over http(s)" not in caplog.text


class TestLoadCredentials:
    SERVICE_ACCOUNT = {"type": "service_account", "project_id": "points-demo"}

    def test_base64_content(self):
        encoded = base64.b64encode(json.dumps(self.SERVICE_ACCOUNT).encode()).decode().rstrip("=")
        with patch("classpoints.bootstrap.credentials.Certificate") as cert:
            result = _load_credentials(FirebaseConfig(service_account_base64=encoded))
        cert.assert_called_once_with(self.SERVICE_ACCOUNT)
        assert result is cert.return_value

    def test_raw_json_content(self):
        with patch("classpoints.bootstrap.credentials.Certificate") as cert:
            _load_credentials(FirebaseConfig(service_account_base64=json.dumps(self.SERVICE_ACCOUNT)))
        cert.assert_called_once_with(self.SERVICE_ACCOUNT)

    def test_path(self, tmp_path):
        key = tmp_path / "key.json"
        key.write_text(json.dumps(self.SERVICE_ACCOUNT))
        with patch("classpoints.bootstrap.credentials.Certificate") as cert:
            _load_credentials(FirebaseConfig(service_account_path=str(key)))
        cert.assert_called_once_with(str(key))

    def test_nothing_configured(self):
        assert _load_credentials(FirebaseConfig()) is None


class TestConfig:
    def test_from_dict_accepts_camel_case(self):
        config = FirebaseConfig.from_dict({"apiKey": "k", "projectId": "p", "authDomain": "p.firebaseapp.com"})
        assert config.api_key == "k"
        assert config.project_id == "p"
        assert config.auth_domain == "p.firebaseapp.com"
        assert config.app_name == "classroom-points"

    def test_load_config_from_environment(self, monkeypatch):
        monkeypatch.setenv("FIREBASE_API_KEY", "env-key")
        monkeypatch.setenv("FIREBASE_PROJECT_ID", "env-project")
        monkeypatch.setenv("APP_ORIGIN", "http://localhost:5173")
        monkeypatch.delenv("FIREBASE_SERVICE_ACCOUNT_PATH", raising=False)

        with patch("core.config.load_env_files"):
            config = load_config()

        assert config.api_key == "env-key"
        assert config.project_id == "env-project"
        assert config.origin == "http://localhost:5173"
        assert config.service_account_path is None
