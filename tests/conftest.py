from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi import FastAPI

from gatekeep.core.config import Settings
from gatekeep.main import create_app
from gatekeep.models.client_registration import ClientRegistration
from gatekeep.services.session_store import InMemorySessionStore
from gatekeep.testing.client import SecurityTestClient, security_test_client

# Ensure repo root is on sys.path so `import gatekeep` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TEST_SETTINGS = Settings(
    app_env="test",
    log_level="info",
    log_json=False,
    session_cookie_name="SESSION",
    session_ttl_sec=1800,
)


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore(TEST_SETTINGS.session_ttl_sec)


@pytest.fixture
def app(session_store: InMemorySessionStore) -> FastAPI:
    return create_app(
        TEST_SETTINGS, session_store=session_store, configure_logging=False
    )


@pytest.fixture
def client(app: FastAPI) -> SecurityTestClient:
    return security_test_client(app, headers={"Accept": "application/json"})


# ---------------------------------------------------------------------------
# Registration helpers
# ---------------------------------------------------------------------------


def make_registration(registration_id: str = "github") -> ClientRegistration:
    """A complete authorization-code registration for ``registration_id``."""
    return (
        ClientRegistration.with_registration_id(registration_id)
        .client_id(f"{registration_id}-client")
        .client_secret("secret")
        .authorization_uri(f"https://{registration_id}.example.org/authorize")
        .token_uri(f"https://{registration_id}.example.org/token")
        .redirect_uri("https://app.example.org/login/oauth2/code/" + registration_id)
        .scope("read", "write")
        .build()
    )
