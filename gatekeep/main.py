from __future__ import annotations

import logging

from fastapi import FastAPI

from gatekeep.api.logout import router as logout_router
from gatekeep.api.session_info import router as session_router
from gatekeep.core.config import SETTINGS, Settings
from gatekeep.core.logging import setup_logging
from gatekeep.middleware.request_context import RequestContextMiddleware
from gatekeep.middleware.security_context import SecurityContextMiddleware
from gatekeep.middleware.session import SessionMiddleware
from gatekeep.repos.security_context_repo import SessionSecurityContextRepo
from gatekeep.services.session_store import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings = SETTINGS,
    *,
    session_store: SessionStore | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Build a FastAPI app with the gatekeep middleware stack installed.

    Callers add their own routers to the returned app.
    """
    if configure_logging:
        setup_logging(settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title="gatekeep",
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
    )
    # An empty store is falsy (it defines __len__), so test for None.
    store = (
        session_store
        if session_store is not None
        else InMemorySessionStore(settings.session_ttl_sec)
    )
    app.state.session_store = store

    # Middleware execution order: last-added runs first (outermost layer).
    # RequestContext (outermost) → Session → SecurityContext → route handler
    app.add_middleware(SecurityContextMiddleware, repo=SessionSecurityContextRepo())
    app.add_middleware(
        SessionMiddleware,
        store=store,
        cookie_name=settings.session_cookie_name,
        https_only=settings.is_prod,
    )
    app.add_middleware(RequestContextMiddleware)

    app.include_router(session_router)
    app.include_router(logout_router)

    logger.info(
        "gatekeep app created  env=%s log_level=%s session_cookie=%s",
        settings.app_env,
        settings.log_level,
        settings.session_cookie_name,
    )
    return app
