from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from gatekeep.models.client_registration import ClientRegistration


def _check_window(issued_at: datetime | None, expires_at: datetime | None) -> None:
    if issued_at is not None and expires_at is not None and expires_at <= issued_at:
        raise ValueError("expires_at must be after issued_at")


@dataclass(frozen=True, slots=True)
class OAuth2AccessToken:
    token_value: str
    scopes: frozenset[str] = frozenset()
    issued_at: datetime | None = None
    expires_at: datetime | None = None
    token_type: str = "Bearer"

    def __post_init__(self) -> None:
        if not self.token_value:
            raise ValueError("token_value cannot be empty")
        _check_window(self.issued_at, self.expires_at)

    @staticmethod
    def bearer(
        token_value: str,
        scopes: Iterable[str] = (),
        issued_at: datetime | None = None,
        expires_at: datetime | None = None,
    ) -> OAuth2AccessToken:
        return OAuth2AccessToken(
            token_value=token_value,
            scopes=frozenset(scopes),
            issued_at=issued_at,
            expires_at=expires_at,
        )


@dataclass(frozen=True, slots=True)
class OAuth2RefreshToken:
    token_value: str
    issued_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.token_value:
            raise ValueError("token_value cannot be empty")


@dataclass(frozen=True, slots=True)
class OAuth2AuthorizedClient:
    """A client registration paired with the tokens issued to it for one principal."""

    client_registration: ClientRegistration
    principal_name: str
    access_token: OAuth2AccessToken
    refresh_token: OAuth2RefreshToken | None = None

    def __post_init__(self) -> None:
        if self.client_registration is None:
            raise ValueError("client_registration cannot be None")
        if not self.principal_name:
            raise ValueError("principal_name cannot be empty")
        if self.access_token is None:
            raise ValueError("access_token cannot be None")

    @property
    def registration_id(self) -> str:
        return self.client_registration.registration_id
