from __future__ import annotations

from starlette.requests import HTTPConnection

from gatekeep.models.authentication import SecurityContext


class SessionSecurityContextRepo:
    """Stores the SecurityContext as a web-session attribute."""

    SECURITY_CONTEXT_ATTR = "GATEKEEP_SECURITY_CONTEXT"

    def load(self, request: HTTPConnection) -> SecurityContext | None:
        if "session" not in request.scope:
            return None
        return request.session.get(self.SECURITY_CONTEXT_ATTR)

    def save(self, request: HTTPConnection, context: SecurityContext) -> None:
        if context.authentication is None:
            self.clear(request)
            return
        request.session[self.SECURITY_CONTEXT_ATTR] = context

    def clear(self, request: HTTPConnection) -> None:
        if "session" in request.scope:
            request.session.pop(self.SECURITY_CONTEXT_ATTR, None)
