# app/utils/test_display_name.py

import pytest

from app.models.session import AuthSession
from app.utils.display_name import (
    MEMBER_RULES,
    POST_AUTHOR_RULES,
    is_placeholder_email,
    login_email_for,
    resolve_display_name,
    token_name,
    username_to_email,
)

DOMAIN = "private.marneilx.com"


def make_session(**claims):
    return AuthSession.from_claims("token", {"uid": "u1", **claims})


def test_username_to_email():
    assert username_to_email(" Alice ", DOMAIN) == "alice@private.marneilx.com"


def test_login_email_for():
    assert login_email_for("alice@example.com", DOMAIN) == "alice@example.com"
    assert login_email_for("alice", DOMAIN) == "alice@private.marneilx.com"


def test_is_placeholder_email():
    assert is_placeholder_email("bob@PRIVATE.marneilx.com", DOMAIN)
    assert not is_placeholder_email("bob@example.com", DOMAIN)
    assert not is_placeholder_email(None, DOMAIN)


@pytest.mark.parametrize("claims, expected", [
    ({"name": "Alice", "email": "alice@example.com"}, "Alice"),
    ({"email": f"bob@{DOMAIN}"}, "bob"),
    ({"email": "carol@example.com"}, "carol@example.com"),
    ({}, "Anonymous"),
    ({"name": "   "}, "Anonymous"),
])
def test_post_author_rules(claims, expected):
    assert resolve_display_name(make_session(**claims), POST_AUTHOR_RULES, DOMAIN) == expected


@pytest.mark.parametrize("claims, expected", [
    ({"name": "Alice", "email": "alice@example.com"}, "Alice"),
    ({"email": f"bob@{DOMAIN}"}, "bob"),
    ({"email": "carol@example.com"}, "carol"),
    ({}, "User"),
])
def test_member_rules(claims, expected):
    assert resolve_display_name(make_session(**claims), MEMBER_RULES, DOMAIN) == expected


def test_rules_without_fallback_raise():
    with pytest.raises(ValueError):
        resolve_display_name(make_session(), (token_name,), DOMAIN)
