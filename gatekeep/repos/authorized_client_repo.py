from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any, Protocol

from starlette.requests import HTTPConnection

from gatekeep.models.authentication import Authentication
from gatekeep.models.authorized_client import OAuth2AuthorizedClient

logger = logging.getLogger(__name__)

# Scope key under which authorized clients can be attached to a single request.
REQUEST_AUTHORIZED_CLIENTS_KEY = "gatekeep.authorized_clients"


class AuthorizedClientRepo(Protocol):
    def load_authorized_client(
        self,
        registration_id: str,
        principal: Authentication | None,
        request: HTTPConnection,
    ) -> OAuth2AuthorizedClient | None: ...

    def save_authorized_client(
        self,
        authorized_client: OAuth2AuthorizedClient,
        principal: Authentication | None,
        request: HTTPConnection,
    ) -> None: ...

    def remove_authorized_client(
        self,
        registration_id: str,
        principal: Authentication | None,
        request: HTTPConnection,
    ) -> None: ...


def _session(request: HTTPConnection) -> MutableMapping[str, Any]:
    if "session" not in request.scope:
        raise RuntimeError(
            "SessionMiddleware must be installed to use SessionAuthorizedClientRepo"
        )
    return request.session


class SessionAuthorizedClientRepo:
    """Keeps a ``{registration_id: OAuth2AuthorizedClient}`` map in the web session.

    The principal is not consulted: a session belongs to one user already.
    """

    AUTHORIZED_CLIENTS_ATTR = "gatekeep.SessionAuthorizedClientRepo.AUTHORIZED_CLIENTS"

    def load_authorized_client(
        self,
        registration_id: str,
        principal: Authentication | None,
        request: HTTPConnection,
    ) -> OAuth2AuthorizedClient | None:
        if not registration_id:
            raise ValueError("registration_id cannot be empty")
        clients = _session(request).get(self.AUTHORIZED_CLIENTS_ATTR) or {}
        return clients.get(registration_id)

    def save_authorized_client(
        self,
        authorized_client: OAuth2AuthorizedClient,
        principal: Authentication | None,
        request: HTTPConnection,
    ) -> None:
        session = _session(request)
        clients = dict(session.get(self.AUTHORIZED_CLIENTS_ATTR) or {})
        clients[authorized_client.registration_id] = authorized_client
        session[self.AUTHORIZED_CLIENTS_ATTR] = clients
        logger.debug(
            "Authorized client saved registration_id=%s principal=%s",
            authorized_client.registration_id,
            authorized_client.principal_name,
        )

    def remove_authorized_client(
        self,
        registration_id: str,
        principal: Authentication | None,
        request: HTTPConnection,
    ) -> None:
        if not registration_id:
            raise ValueError("registration_id cannot be empty")
        session = _session(request)
        clients = dict(session.get(self.AUTHORIZED_CLIENTS_ATTR) or {})
        if clients.pop(registration_id, None) is None:
            return
        if clients:
            session[self.AUTHORIZED_CLIENTS_ATTR] = clients
        else:
            session.pop(self.AUTHORIZED_CLIENTS_ATTR, None)


def attach_request_authorized_client(
    scope: MutableMapping[str, Any], authorized_client: OAuth2AuthorizedClient
) -> None:
    """Make ``authorized_client`` visible to this one request only."""
    scope.setdefault(REQUEST_AUTHORIZED_CLIENTS_KEY, {})[
        authorized_client.registration_id
    ] = authorized_client


class RequestAttributeAuthorizedClientRepo:
    """Request-scoped clients first, then the wrapped repository.

    Clients attached with ``attach_request_authorized_client`` (the test
    mutators in gatekeep.testing do this) win over whatever ``delegate``
    holds.  While a request carries such clients, saves and removals stay
    on the request as well.
    """

    def __init__(self, delegate: AuthorizedClientRepo) -> None:
        self._delegate = delegate

    @property
    def delegate(self) -> AuthorizedClientRepo:
        return self._delegate

    def load_authorized_client(
        self,
        registration_id: str,
        principal: Authentication | None,
        request: HTTPConnection,
    ) -> OAuth2AuthorizedClient | None:
        clients = request.scope.get(REQUEST_AUTHORIZED_CLIENTS_KEY)
        if clients is not None:
            return clients.get(registration_id)
        return self._delegate.load_authorized_client(registration_id, principal, request)

    def save_authorized_client(
        self,
        authorized_client: OAuth2AuthorizedClient,
        principal: Authentication | None,
        request: HTTPConnection,
    ) -> None:
        if REQUEST_AUTHORIZED_CLIENTS_KEY in request.scope:
            attach_request_authorized_client(request.scope, authorized_client)
            return
        self._delegate.save_authorized_client(authorized_client, principal, request)

    def remove_authorized_client(
        self,
        registration_id: str,
        principal: Authentication | None,
        request: HTTPConnection,
    ) -> None:
        clients = request.scope.get(REQUEST_AUTHORIZED_CLIENTS_KEY)
        if clients is not None:
            clients.pop(registration_id, None)
            return
        self._delegate.remove_authorized_client(registration_id, principal, request)
