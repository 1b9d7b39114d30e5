from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from gatekeep.models.authority import Authority
from gatekeep.models.oauth2_user import OAuth2User


@runtime_checkable
class Authentication(Protocol):
    @property
    def name(self) -> str: ...
    @property
    def principal(self) -> Any: ...
    @property
    def authorities(self) -> frozenset[Authority]: ...
    @property
    def authenticated(self) -> bool: ...


@dataclass(frozen=True, eq=False)
class OAuth2AuthenticationToken:
    """Authentication produced by a completed OAuth2 login.

    ``authorized_client_registration_id`` ties the session to the client
    registration the user logged in through, so the matching authorized
    client can be looked up later.
    """

    principal: OAuth2User
    authorities: frozenset[Authority]
    authorized_client_registration_id: str

    def __post_init__(self) -> None:
        if self.principal is None:
            raise ValueError("principal cannot be None")
        if not self.authorized_client_registration_id:
            raise ValueError("authorized_client_registration_id cannot be empty")
        object.__setattr__(self, "authorities", frozenset(self.authorities or ()))

    @property
    def name(self) -> str:
        return self.principal.name

    @property
    def authenticated(self) -> bool:
        return True

    def has_authority(self, authority: str) -> bool:
        return any(a.authority == authority for a in self.authorities)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OAuth2AuthenticationToken):
            return NotImplemented
        return (
            self.principal == other.principal
            and self.authorities == other.authorities
            and self.authorized_client_registration_id
            == other.authorized_client_registration_id
        )

    def __hash__(self) -> int:
        return hash((self.name, self.authorized_client_registration_id))


@dataclass(frozen=True, slots=True)
class UsernameAuthenticationToken:
    """Minimal authenticated identity: a username and its authorities."""

    username: str
    authorities: frozenset[Authority] = frozenset()

    @staticmethod
    def new(username: str, authorities: Iterable[Authority] = ()) -> UsernameAuthenticationToken:
        return UsernameAuthenticationToken(username, frozenset(authorities))

    @property
    def name(self) -> str:
        return self.username

    @property
    def principal(self) -> str:
        return self.username

    @property
    def authenticated(self) -> bool:
        return True


@dataclass(slots=True)
class SecurityContext:
    authentication: Authentication | None = field(default=None)
