from __future__ import annotations

import pytest

from gatekeep.models.authority import (
    GrantedAuthority,
    OAuth2UserAuthority,
    OidcUserAuthority,
    authority_list,
)
from gatekeep.models.oauth2_user import DefaultOAuth2User, DefaultOidcUser, OAuth2User
from gatekeep.models.oidc import OidcIdToken, OidcUserInfo


def test_name_comes_from_name_attribute() -> None:
    user = DefaultOAuth2User(authority_list("SCOPE_user"), {"id": 42, "login": "octo"}, "id")
    assert user.name == "42"
    assert isinstance(user, OAuth2User)


def test_missing_name_attribute_rejected() -> None:
    with pytest.raises(ValueError, match="Missing attribute 'sub' in attributes"):
        DefaultOAuth2User(authority_list("SCOPE_user"), {"login": "octo"}, "sub")


def test_empty_attributes_rejected() -> None:
    with pytest.raises(ValueError, match="attributes cannot be empty"):
        DefaultOAuth2User(authority_list("SCOPE_user"), {}, "sub")


def test_attributes_are_copied_and_read_only() -> None:
    source = {"sub": "subject"}
    user = DefaultOAuth2User(authority_list("SCOPE_user"), source, "sub")

    source["sub"] = "changed"
    assert user.attributes["sub"] == "subject"
    with pytest.raises(TypeError):
        user.attributes["sub"] = "x"  # type: ignore[index]


def test_users_with_same_content_are_equal() -> None:
    a = DefaultOAuth2User(authority_list("SCOPE_user"), {"sub": "s"}, "sub")
    b = DefaultOAuth2User(list(authority_list("SCOPE_user")), {"sub": "s"}, "sub")
    assert a == b
    assert hash(a) == hash(b)


def test_granted_authority_equality_and_empty() -> None:
    assert GrantedAuthority("SCOPE_user") == GrantedAuthority("SCOPE_user")
    assert str(GrantedAuthority("ROLE_ADMIN")) == "ROLE_ADMIN"
    with pytest.raises(ValueError):
        GrantedAuthority("")


def test_oauth2_user_authority_hashable_and_distinct_from_plain() -> None:
    authority = OAuth2UserAuthority({"sub": "s"})
    assert authority.authority == "ROLE_USER"
    assert authority != GrantedAuthority("ROLE_USER")
    assert {authority, OAuth2UserAuthority({"sub": "s"})} == {authority}


def test_oidc_user_merges_user_info_over_id_token() -> None:
    id_token = OidcIdToken("id-token", {"sub": "user", "email": "old@example.org"})
    user_info = OidcUserInfo({"email": "new@example.org"})

    user = DefaultOidcUser.new(
        [OidcUserAuthority.new(id_token, user_info)], id_token, user_info
    )

    assert user.name == "user"
    assert user.claims["email"] == "new@example.org"
    assert user.id_token is id_token


def test_id_token_builder_and_validation() -> None:
    token = OidcIdToken.with_token_value("t").subject("alice").issuer("https://idp").build()
    assert token.subject == "alice"
    assert token.issuer == "https://idp"

    with pytest.raises(ValueError, match="claims cannot be empty"):
        OidcIdToken("t", {})
    with pytest.raises(ValueError, match="token_value cannot be empty"):
        OidcIdToken("", {"sub": "x"})
