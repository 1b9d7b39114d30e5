from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from gatekeep.api.dependencies import require_authentication
from gatekeep.models.authentication import Authentication, OAuth2AuthenticationToken

logger = logging.getLogger(__name__)

router = APIRouter(tags=["session"])


class SessionOut(BaseModel):
    name: str
    authorities: list[str]
    registration_id: str | None = None
    attributes: dict[str, object] = {}


@router.get("/session/me", response_model=SessionOut)
def get_session(
    authentication: Annotated[Authentication, Depends(require_authentication)],
) -> SessionOut:
    """Summary of the authenticated principal behind this session."""
    out = SessionOut(
        name=authentication.name,
        authorities=sorted(a.authority for a in authentication.authorities),
    )
    if isinstance(authentication, OAuth2AuthenticationToken):
        out.registration_id = authentication.authorized_client_registration_id
        out.attributes = dict(authentication.principal.attributes)
    logger.debug("Session inspected by principal=%s", authentication.name)
    return out
