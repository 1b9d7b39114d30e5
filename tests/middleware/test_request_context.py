"""Tests for the request context middleware.

Verifies that every response gets an X-Request-ID header (generated or
echoed from the request) and that one summary line is logged per request.
"""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from gatekeep.models.authentication import UsernameAuthenticationToken
from gatekeep.testing.mutators import mock_authentication, mock_oauth2_login


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    """When no X-Request-ID header is sent, one is generated."""
    resp = client.post("/logout")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)  # raises ValueError if invalid


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "my-custom-request-id-123"
    resp = client.post("/logout", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    """Even error responses (401, 404) get an X-Request-ID header."""
    assert client.get("/session/me").headers.get("x-request-id") is not None
    assert client.get("/no-such-page").headers.get("x-request-id") is not None


def test_summary_line_carries_request_fields(
    client, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="gatekeep.middleware.request_context"):
        client.mutate_with(mock_oauth2_login()).get(
            "/session/me", headers={"X-Request-ID": "req-1"}
        )

    records = [
        r for r in caplog.records if r.name == "gatekeep.middleware.request_context"
    ]
    assert len(records) == 1
    record = records[0]
    assert record.request_id == "req-1"
    assert record.method == "GET"
    assert record.path == "/session/me"
    assert record.status_code == 200
    assert record.principal == "test-subject"


def test_summary_line_for_anonymous_request(
    client, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="gatekeep.middleware.request_context"):
        client.get("/session/me")

    record = next(
        r for r in caplog.records if r.name == "gatekeep.middleware.request_context"
    )
    assert record.principal == "-"
    assert record.status_code == 401


def test_summary_line_uses_authentication_name(
    client, caplog: pytest.LogCaptureFixture
) -> None:
    auth = UsernameAuthenticationToken.new("bob")
    with caplog.at_level(logging.INFO, logger="gatekeep.middleware.request_context"):
        client.mutate_with(mock_authentication(auth)).get("/session/me")

    record = next(
        r for r in caplog.records if r.name == "gatekeep.middleware.request_context"
    )
    assert record.principal == "bob"
