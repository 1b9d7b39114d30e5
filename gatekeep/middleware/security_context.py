from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import HTTPConnection, Request
from starlette.responses import Response
from starlette.types import ASGIApp

from gatekeep.core.logging import principal_var
from gatekeep.models.authentication import SecurityContext
from gatekeep.repos.security_context_repo import SessionSecurityContextRepo

SECURITY_CONTEXT_KEY = "gatekeep.security_context"


def get_security_context(request: HTTPConnection) -> SecurityContext:
    """The request's SecurityContext; empty when nobody is logged in."""
    context = request.scope.get(SECURITY_CONTEXT_KEY)
    if context is None:
        context = SecurityContext()
        request.scope[SECURITY_CONTEXT_KEY] = context
    return context


class SecurityContextMiddleware(BaseHTTPMiddleware):
    """Publishes the SecurityContext on the request scope.

    A context already on the scope (placed by an outer ASGI layer, e.g.
    gatekeep.testing) is kept as-is; otherwise it is loaded from the
    session.
    """

    def __init__(
        self, app: ASGIApp, repo: SessionSecurityContextRepo | None = None
    ) -> None:
        super().__init__(app)
        self._repo = repo or SessionSecurityContextRepo()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        context = request.scope.get(SECURITY_CONTEXT_KEY)
        if context is None:
            context = self._repo.load(request) or SecurityContext()
            request.scope[SECURITY_CONTEXT_KEY] = context

        authentication = context.authentication
        token = principal_var.set(authentication.name if authentication else "-")
        try:
            return await call_next(request)
        finally:
            principal_var.reset(token)
