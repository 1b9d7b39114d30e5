from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from gatekeep.main import create_app
from gatekeep.services.session_store import InMemorySessionStore
from tests.conftest import TEST_SETTINGS


def test_create_app_registers_routes(app: FastAPI) -> None:
    client = TestClient(app)
    assert client.get("/session/me").status_code == 401
    assert client.post("/logout").status_code == 204
    assert client.get("/no-such-page").status_code == 404


def test_create_app_uses_given_session_store(
    app: FastAPI, session_store: InMemorySessionStore
) -> None:
    # A fresh store is empty, hence falsy; it must still be the one used.
    assert not session_store
    assert app.state.session_store is session_store


def test_create_app_builds_store_from_settings() -> None:
    app = create_app(TEST_SETTINGS, configure_logging=False)
    assert isinstance(app.state.session_store, InMemorySessionStore)


def test_docs_disabled_outside_dev(app: FastAPI) -> None:
    assert TestClient(app).get("/docs").status_code == 404


def test_plain_test_client_is_anonymous(app: FastAPI) -> None:
    assert TestClient(app).get("/session/me").status_code == 401


def test_sessions_land_in_given_store(
    app: FastAPI, session_store: InMemorySessionStore
) -> None:
    @app.post("/remember")
    def remember(request: Request) -> dict[str, str]:
        request.session["k"] = "v"
        return {}

    TestClient(app).post("/remember")
    assert len(session_store) == 1
