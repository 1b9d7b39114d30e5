from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from gatekeep.models.authority import Authority
from gatekeep.models.oidc import OidcIdToken, OidcUserInfo


@runtime_checkable
class OAuth2User(Protocol):
    @property
    def attributes(self) -> Mapping[str, Any]: ...
    @property
    def authorities(self) -> frozenset[Authority]: ...
    @property
    def name(self) -> str: ...


@dataclass(frozen=True, eq=False)
class DefaultOAuth2User:
    """User returned by an OAuth2 provider.

    ``name_attribute_key`` names the attribute that identifies the user
    (``sub`` for most providers, ``id`` or ``login`` for some). It must be
    present in ``attributes``.
    """

    authorities: frozenset[Authority]
    attributes: Mapping[str, Any]
    name_attribute_key: str

    def __post_init__(self) -> None:
        if not self.attributes:
            raise ValueError("attributes cannot be empty")
        if not self.name_attribute_key:
            raise ValueError("name_attribute_key cannot be empty")
        if self.name_attribute_key not in self.attributes:
            raise ValueError(
                f"Missing attribute '{self.name_attribute_key}' in attributes"
            )
        object.__setattr__(self, "authorities", _freeze(self.authorities))
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def name(self) -> str:
        return str(self.attributes[self.name_attribute_key])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DefaultOAuth2User):
            return NotImplemented
        return (
            self.name == other.name
            and self.authorities == other.authorities
            and dict(self.attributes) == dict(other.attributes)
        )

    def __hash__(self) -> int:
        return hash((self.name, self.authorities))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"authorities={sorted(str(a) for a in self.authorities)}, "
            f"attributes={dict(self.attributes)!r})"
        )


@dataclass(frozen=True, eq=False, repr=False)
class DefaultOidcUser(DefaultOAuth2User):
    id_token: OidcIdToken | None = None
    user_info: OidcUserInfo | None = None

    @staticmethod
    def new(
        authorities: Iterable[Authority],
        id_token: OidcIdToken,
        user_info: OidcUserInfo | None = None,
        name_attribute_key: str = "sub",
    ) -> DefaultOidcUser:
        claims = dict(id_token.claims)
        if user_info is not None:
            claims.update(user_info.claims)
        return DefaultOidcUser(
            authorities=frozenset(authorities),
            attributes=claims,
            name_attribute_key=name_attribute_key,
            id_token=id_token,
            user_info=user_info,
        )

    @property
    def claims(self) -> Mapping[str, Any]:
        return self.attributes


def _freeze(authorities: Iterable[Authority]) -> frozenset[Authority]:
    if authorities is None:
        raise ValueError("authorities cannot be None")
    return frozenset(authorities)
