# Shared fixtures for the callback tests.

import json
from typing import Any, Dict

import pytest
import requests
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.deps import get_settings, get_store_factory
from app.main import app
from app.services.firestore import PersistenceError

SERVICE_ACCOUNT = json.dumps(
    {
        "type": "service_account",
        "project_id": "test-project",
        "private_key_id": "abc",
        "client_email": "bot@test-project.iam.gserviceaccount.com",
    }
)


def make_settings(**overrides) -> Settings:
    values = {
        "CLIENT_ID": "client-123",
        "CLIENT_SECRET": "shh-secret",
        "REDIRECT_URI": "https://example.test/api/callback",
        "FIREBASE_SERVICE_ACCOUNT": SERVICE_ACCOUNT,
        "FIREBASE_PROJECT_ID": "test-project",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_response(status_code: int = 200, json_body: Any = None, text: str | None = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    if json_body is not None:
        resp._content = json.dumps(json_body).encode("utf-8")
        resp.headers["content-type"] = "application/json"
    else:
        resp._content = (text or "").encode("utf-8")
        resp.headers["content-type"] = "text/plain"
    resp.encoding = "utf-8"
    resp.url = "https://discord.com/api/v10/test"
    return resp


class FakeUserStore:
    """In-memory stand-in with Firestore's set(..., merge=True) semantics."""

    def __init__(self):
        self.docs: Dict[str, Dict[str, Any]] = {}
        self.writes = 0
        self.error: Exception | None = None

    def merge(self, user_id: str, data: Dict[str, Any]) -> None:
        if self.error is not None:
            raise self.error
        self.writes += 1
        self.docs.setdefault(user_id, {}).update(data)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def store():
    return FakeUserStore()


@pytest.fixture
def failing_store():
    s = FakeUserStore()
    s.error = PersistenceError("403 Missing or insufficient permissions.")
    return s


@pytest.fixture
def client(settings, store):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_store_factory] = lambda: (lambda s: store)
    yield TestClient(app)
    app.dependency_overrides.clear()


TOKEN_BODY = {
    "access_token": "access-1",
    "refresh_token": "refresh-1",
    "expires_in": 3600,
    "scope": "identify guilds.join",
    "token_type": "Bearer",
}

USER_BODY = {"id": "U1", "username": "alice", "discriminator": "0", "global_name": "Alice"}
