"""Session middleware backed by a server-side SessionStore.

Exposes the session attributes as ``scope["session"]`` so Starlette's
``request.session`` works unchanged.  A new session is only persisted
(and its cookie only issued) once something was written into it.
"""

from __future__ import annotations

import logging
from typing import Literal

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import HTTPConnection, Request
from starlette.responses import Response
from starlette.types import ASGIApp

from gatekeep.services.session_store import SessionStore, WebSession

logger = logging.getLogger(__name__)

WEB_SESSION_KEY = "gatekeep.web_session"


def get_web_session(request: HTTPConnection) -> WebSession:
    try:
        return request.scope[WEB_SESSION_KEY]
    except KeyError:
        raise RuntimeError("SessionMiddleware is not installed") from None


def invalidate_session(request: HTTPConnection) -> None:
    """Drop every attribute and expire the session cookie at response time."""
    get_web_session(request).invalidate()


class SessionMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        store: SessionStore,
        cookie_name: str = "SESSION",
        *,
        path: str = "/",
        same_site: Literal["lax", "strict", "none"] = "lax",
        https_only: bool = False,
    ) -> None:
        super().__init__(app)
        self._store = store
        self._cookie_name = cookie_name
        self._path = path
        self._same_site = same_site
        self._https_only = https_only

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        session_id = request.cookies.get(self._cookie_name)
        session = self._store.get(session_id) if session_id else None
        is_new = session is None
        # Cookie names a session that expired or never existed.
        stale_cookie = is_new and bool(session_id)
        if session is None:
            session = self._store.create()

        request.scope["session"] = session.attributes
        request.scope[WEB_SESSION_KEY] = session

        response = await call_next(request)

        if session.invalidated or not session.attributes:
            if not is_new:
                self._store.delete(session.id)
                response.delete_cookie(self._cookie_name, path=self._path)
                logger.debug("Session ended id=%s…", session.id[:8])
            elif stale_cookie:
                response.delete_cookie(self._cookie_name, path=self._path)
            return response

        self._store.save(session)
        if is_new:
            response.set_cookie(
                self._cookie_name,
                session.id,
                path=self._path,
                httponly=True,
                secure=self._https_only,
                samesite=self._same_site,
            )
            logger.debug("Session started id=%s…", session.id[:8])
        return response
