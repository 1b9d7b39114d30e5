from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any


def _claims_equal(a: Mapping[str, Any], b: Mapping[str, Any]) -> bool:
    return dict(a) == dict(b)


@dataclass(frozen=True, eq=False)
class OidcUserInfo:
    """Claims returned by the provider's UserInfo endpoint."""

    claims: Mapping[str, Any]

    def __post_init__(self) -> None:
        if not self.claims:
            raise ValueError("claims cannot be empty")
        object.__setattr__(self, "claims", MappingProxyType(dict(self.claims)))

    @property
    def subject(self) -> str | None:
        return self.claims.get("sub")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OidcUserInfo):
            return NotImplemented
        return _claims_equal(self.claims, other.claims)

    def __hash__(self) -> int:
        return hash(frozenset(self.claims))

    @staticmethod
    def builder() -> ClaimsBuilder:
        return ClaimsBuilder()


@dataclass(frozen=True, eq=False)
class OidcIdToken:
    token_value: str
    claims: Mapping[str, Any]
    issued_at: datetime | None = None
    expires_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.token_value:
            raise ValueError("token_value cannot be empty")
        if not self.claims:
            raise ValueError("claims cannot be empty")
        if (
            self.issued_at is not None
            and self.expires_at is not None
            and self.expires_at <= self.issued_at
        ):
            raise ValueError("expires_at must be after issued_at")
        object.__setattr__(self, "claims", MappingProxyType(dict(self.claims)))

    @property
    def subject(self) -> str | None:
        return self.claims.get("sub")

    @property
    def issuer(self) -> str | None:
        return self.claims.get("iss")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OidcIdToken):
            return NotImplemented
        return self.token_value == other.token_value and _claims_equal(
            self.claims, other.claims
        )

    def __hash__(self) -> int:
        return hash((self.token_value, frozenset(self.claims)))

    @staticmethod
    def with_token_value(token_value: str) -> IdTokenBuilder:
        return IdTokenBuilder(token_value)


class ClaimsBuilder:
    """Mutable claim set, handed to callers that customize a token."""

    def __init__(self, claims: Mapping[str, Any] | None = None) -> None:
        self._claims: dict[str, Any] = dict(claims or {})

    def claim(self, name: str, value: Any) -> ClaimsBuilder:
        self._claims[name] = value
        return self

    def claims(self, consumer: Callable[[dict[str, Any]], None]) -> ClaimsBuilder:
        consumer(self._claims)
        return self

    def subject(self, subject: str) -> ClaimsBuilder:
        return self.claim("sub", subject)

    def issuer(self, issuer: str) -> ClaimsBuilder:
        return self.claim("iss", issuer)

    def build(self) -> OidcUserInfo:
        return OidcUserInfo(self._claims)


class IdTokenBuilder(ClaimsBuilder):
    def __init__(
        self, token_value: str, claims: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(claims)
        self._token_value = token_value
        self._issued_at: datetime | None = None
        self._expires_at: datetime | None = None

    def token_value(self, token_value: str) -> IdTokenBuilder:
        self._token_value = token_value
        return self

    def issued_at(self, issued_at: datetime) -> IdTokenBuilder:
        self._issued_at = issued_at
        return self

    def expires_at(self, expires_at: datetime) -> IdTokenBuilder:
        self._expires_at = expires_at
        return self

    def build(self) -> OidcIdToken:  # type: ignore[override]
        return OidcIdToken(
            token_value=self._token_value,
            claims=self._claims,
            issued_at=self._issued_at,
            expires_at=self._expires_at,
        )
