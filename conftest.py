from typing import Callable, Tuple

import pytest
from fastapi.testclient import TestClient

from messenger.core.config import Settings
from messenger.db.init_db import init_db
from messenger.db.session import build_engine, build_session_factory
from messenger.main import create_app
from messenger.services.message_service import MessageService
from messenger.services.message_store import SqlMessageStore


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Isolated database; limits high enough that only dedicated tests trip them."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'messenger-test.db'}",
        JWT_SECRET="test-secret",
        LOGIN_RATE_LIMIT=1000,
        MESSAGE_RATE_LIMIT=1000,
        TRUST_FORWARDED_FOR=True,
    )


@pytest.fixture
def make_client(settings):
    """Build a started TestClient, optionally overriding settings fields."""
    clients = []

    def _make(raise_server_exceptions: bool = True, **overrides) -> TestClient:
        cfg = settings.model_copy(update=overrides)
        client = TestClient(create_app(cfg), raise_server_exceptions=raise_server_exceptions)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def api_client(make_client) -> TestClient:
    return make_client()


@pytest.fixture
def register_and_login(api_client) -> Callable[..., Tuple[str, str]]:
    """Register a user, log in, and return ``(user_id, token)``."""

    def _register(name: str, email: str, password: str = "secret1", client: TestClient = None):
        client = client or api_client
        resp = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 200, resp.text

        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        token = resp.json()["token"]

        profile = client.get("/api/profile", headers=_auth_header(token))
        assert profile.status_code == 200
        return profile.json()["userId"], token

    return _register


def _auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# Service-level fixtures ---------------------------------------------------------

@pytest.fixture
def session_factory(settings):
    engine = build_engine(settings.database_url)
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def store(session_factory) -> SqlMessageStore:
    return SqlMessageStore(session_factory, timeout=5.0)


@pytest.fixture
def service(store) -> MessageService:
    return MessageService(store, default_limit=10, max_limit=100)
