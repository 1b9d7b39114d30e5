"""Logout endpoint: ends the server-side session.

Clears the security context first so that code running later in the same
request no longer sees the user, then invalidates the session so the
SESSION cookie is expired on the response.  Logging out an anonymous
session is a no-op that still answers 204.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response

from gatekeep.middleware.security_context import get_security_context
from gatekeep.middleware.session import invalidate_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/logout", status_code=204)
def logout(request: Request) -> Response:
    context = get_security_context(request)
    if context.authentication is not None:
        logger.info("Logout principal=%s", context.authentication.name)
    context.authentication = None
    invalidate_session(request)
    return Response(status_code=204)
