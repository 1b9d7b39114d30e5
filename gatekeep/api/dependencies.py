import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from gatekeep.middleware.security_context import get_security_context
from gatekeep.models.authentication import Authentication, OAuth2AuthenticationToken
from gatekeep.models.authorized_client import OAuth2AuthorizedClient
from gatekeep.repos.authorized_client_repo import (
    AuthorizedClientRepo,
    RequestAttributeAuthorizedClientRepo,
)
from gatekeep.repos.client_registration_repo import ClientRegistrationRepo

logger = logging.getLogger(__name__)


def current_authentication(request: Request) -> Authentication | None:
    """The request's Authentication, or None for anonymous requests."""
    return get_security_context(request).authentication


def require_authentication(
    authentication: Annotated[Authentication | None, Depends(current_authentication)],
) -> Authentication:
    if authentication is None or not authentication.authenticated:
        logger.warning("Anonymous request rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return authentication


def require_oauth2_login(
    authentication: Annotated[Authentication, Depends(require_authentication)],
) -> OAuth2AuthenticationToken:
    """Demand a session established through OAuth2 login."""
    if not isinstance(authentication, OAuth2AuthenticationToken):
        logger.warning(
            "Non-OAuth2 authentication rejected: principal=%s type=%s",
            authentication.name,
            type(authentication).__name__,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="OAuth2 login required",
        )
    return authentication


def require_authority(authority: str):
    """Dependency factory: demand a specific granted authority.

    Usage: Depends(require_authority("SCOPE_admin"))
    """

    def _guard(
        authentication: Annotated[Authentication, Depends(require_authentication)],
    ) -> Authentication:
        if not any(a.authority == authority for a in authentication.authorities):
            logger.warning(
                "Access denied: principal=%s missing authority=%s",
                authentication.name,
                authority,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return authentication

    return _guard


class AuthorizedClientResolver:
    """FastAPI dependency that resolves the OAuth2AuthorizedClient for a request.

    The registration id is the one given here or, when omitted, the one the
    current OAuth2 login was made through.  Clients attached to the request
    itself take precedence over ``authorized_client_repo``.

    Usage::

        resolve_client = AuthorizedClientResolver(registrations, authorized_clients)

        @router.get("/client")
        def client(c: Annotated[OAuth2AuthorizedClient, Depends(resolve_client)]):
            ...
    """

    def __init__(
        self,
        client_registration_repo: ClientRegistrationRepo,
        authorized_client_repo: AuthorizedClientRepo,
        registration_id: str | None = None,
    ) -> None:
        self._registrations = client_registration_repo
        self._authorized_clients = RequestAttributeAuthorizedClientRepo(
            authorized_client_repo
        )
        self._registration_id = registration_id

    def for_registration(self, registration_id: str) -> "AuthorizedClientResolver":
        """Same repositories, pinned to ``registration_id``."""
        return AuthorizedClientResolver(
            self._registrations,
            self._authorized_clients.delegate,
            registration_id=registration_id,
        )

    def __call__(self, request: Request) -> OAuth2AuthorizedClient:
        authentication = current_authentication(request)
        registration_id = self._resolve_registration_id(authentication)

        authorized_client = self._authorized_clients.load_authorized_client(
            registration_id, authentication, request
        )
        if authorized_client is not None:
            return authorized_client

        if self._registrations.find_by_registration_id(registration_id) is None:
            logger.warning("Unknown client registration id=%s", registration_id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Could not find client registration with id '{registration_id}'",
            )

        logger.info(
            "No authorized client for registration=%s principal=%s",
            registration_id,
            authentication.name if authentication else "-",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Client authorization required",
            headers={"WWW-Authenticate": f'OAuth2 realm="{registration_id}"'},
        )

    def _resolve_registration_id(self, authentication: Authentication | None) -> str:
        if self._registration_id:
            return self._registration_id
        if isinstance(authentication, OAuth2AuthenticationToken):
            return authentication.authorized_client_registration_id
        logger.warning("Authorized client requested without a registration id")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unable to resolve the client registration identifier",
        )
