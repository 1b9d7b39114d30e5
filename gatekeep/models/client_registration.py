from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

AuthorizationGrantType = Literal[
    "authorization_code", "client_credentials", "refresh_token", "password"
]

_GRANT_TYPES = ("authorization_code", "client_credentials", "refresh_token", "password")


@dataclass(frozen=True, slots=True)
class ClientRegistration:
    """A client registered with an OAuth2 / OpenID Connect provider."""

    registration_id: str
    client_id: str
    client_secret: str
    authorization_grant_type: AuthorizationGrantType
    redirect_uri: str
    scopes: frozenset[str]
    authorization_uri: str
    token_uri: str
    user_info_uri: str
    user_name_attribute_name: str
    client_name: str

    @staticmethod
    def with_registration_id(registration_id: str) -> ClientRegistrationBuilder:
        return ClientRegistrationBuilder(registration_id)

    @staticmethod
    def from_registration(registration: ClientRegistration) -> ClientRegistrationBuilder:
        return (
            ClientRegistrationBuilder(registration.registration_id)
            .client_id(registration.client_id)
            .client_secret(registration.client_secret)
            .authorization_grant_type(registration.authorization_grant_type)
            .redirect_uri(registration.redirect_uri)
            .scope(*registration.scopes)
            .authorization_uri(registration.authorization_uri)
            .token_uri(registration.token_uri)
            .user_info_uri(registration.user_info_uri)
            .user_name_attribute_name(registration.user_name_attribute_name)
            .client_name(registration.client_name)
        )


class ClientRegistrationBuilder:
    def __init__(self, registration_id: str) -> None:
        if not registration_id:
            raise ValueError("registration_id cannot be empty")
        self._registration_id = registration_id
        self._client_id = ""
        self._client_secret = ""
        self._grant_type: str = "authorization_code"
        self._redirect_uri = ""
        self._scopes: frozenset[str] = frozenset()
        self._authorization_uri = ""
        self._token_uri = ""
        self._user_info_uri = ""
        self._user_name_attribute_name = ""
        self._client_name = ""

    def registration_id(self, registration_id: str) -> ClientRegistrationBuilder:
        self._registration_id = registration_id
        return self

    def client_id(self, client_id: str) -> ClientRegistrationBuilder:
        self._client_id = client_id
        return self

    def client_secret(self, client_secret: str) -> ClientRegistrationBuilder:
        self._client_secret = client_secret
        return self

    def authorization_grant_type(self, grant_type: str) -> ClientRegistrationBuilder:
        self._grant_type = grant_type
        return self

    def redirect_uri(self, redirect_uri: str) -> ClientRegistrationBuilder:
        self._redirect_uri = redirect_uri
        return self

    def scope(self, *scopes: str) -> ClientRegistrationBuilder:
        self._scopes = frozenset(scopes)
        return self

    def scopes(self, scopes: Iterable[str]) -> ClientRegistrationBuilder:
        return self.scope(*scopes)

    def authorization_uri(self, uri: str) -> ClientRegistrationBuilder:
        self._authorization_uri = uri
        return self

    def token_uri(self, uri: str) -> ClientRegistrationBuilder:
        self._token_uri = uri
        return self

    def user_info_uri(self, uri: str) -> ClientRegistrationBuilder:
        self._user_info_uri = uri
        return self

    def user_name_attribute_name(self, name: str) -> ClientRegistrationBuilder:
        self._user_name_attribute_name = name
        return self

    def client_name(self, name: str) -> ClientRegistrationBuilder:
        self._client_name = name
        return self

    def build(self) -> ClientRegistration:
        if not self._registration_id:
            raise ValueError("registration_id cannot be empty")
        if self._grant_type not in _GRANT_TYPES:
            raise ValueError(
                f"authorization_grant_type must be one of {'|'.join(_GRANT_TYPES)} "
                f"(got {self._grant_type!r})"
            )
        if not self._client_id:
            raise ValueError("client_id cannot be empty")
        if self._grant_type == "authorization_code":
            for field_name, value in (
                ("redirect_uri", self._redirect_uri),
                ("authorization_uri", self._authorization_uri),
                ("token_uri", self._token_uri),
            ):
                if not value:
                    raise ValueError(f"{field_name} cannot be empty")
        elif not self._token_uri:
            raise ValueError("token_uri cannot be empty")

        return ClientRegistration(  # type: ignore[arg-type]
            registration_id=self._registration_id,
            client_id=self._client_id,
            client_secret=self._client_secret,
            authorization_grant_type=self._grant_type,
            redirect_uri=self._redirect_uri,
            scopes=self._scopes,
            authorization_uri=self._authorization_uri,
            token_uri=self._token_uri,
            user_info_uri=self._user_info_uri,
            user_name_attribute_name=self._user_name_attribute_name,
            client_name=self._client_name or self._registration_id,
        )
