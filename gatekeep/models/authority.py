from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Union

from gatekeep.models.oidc import OidcIdToken, OidcUserInfo


@dataclass(frozen=True, slots=True)
class GrantedAuthority:
    """A plain string authority such as ``SCOPE_read`` or ``ROLE_ADMIN``."""

    authority: str

    def __post_init__(self) -> None:
        if not self.authority:
            raise ValueError("authority cannot be empty")

    def __str__(self) -> str:
        return self.authority


@dataclass(frozen=True, eq=False)
class OAuth2UserAuthority:
    """Authority granted to a user logged in through an OAuth2 provider.

    Carries the user attributes it was granted for. Two instances are equal
    when both the authority string and the attributes match.
    """

    attributes: Mapping[str, Any]
    authority: str = "ROLE_USER"

    def __post_init__(self) -> None:
        if not self.authority:
            raise ValueError("authority cannot be empty")
        if not self.attributes:
            raise ValueError("attributes cannot be empty")
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.authority == other.authority and dict(self.attributes) == dict(
            other.attributes
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.authority, frozenset(self.attributes)))

    def __str__(self) -> str:
        return self.authority


@dataclass(frozen=True, eq=False)
class OidcUserAuthority(OAuth2UserAuthority):
    """OAuth2UserAuthority whose attributes come from an ID token (+ user info)."""

    id_token: OidcIdToken | None = None
    user_info: OidcUserInfo | None = None

    @staticmethod
    def new(
        id_token: OidcIdToken,
        user_info: OidcUserInfo | None = None,
        authority: str = "ROLE_USER",
    ) -> OidcUserAuthority:
        claims = dict(id_token.claims)
        if user_info is not None:
            claims.update(user_info.claims)
        return OidcUserAuthority(
            attributes=claims,
            authority=authority,
            id_token=id_token,
            user_info=user_info,
        )


Authority = Union[GrantedAuthority, OAuth2UserAuthority]


def authority_list(*names: str) -> tuple[GrantedAuthority, ...]:
    """``authority_list("SCOPE_read", "ROLE_ADMIN")`` -> tuple of GrantedAuthority."""
    return tuple(GrantedAuthority(name) for name in names)
