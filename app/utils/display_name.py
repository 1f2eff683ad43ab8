# app/utils/display_name.py
"""
Display-name resolution.

A name is picked by walking an ordered list of rules; the first rule that
returns a non-empty string wins. Each rule receives the verified session and
the private email domain used for username-only accounts.
"""

from typing import Callable, Optional, Sequence

from app.models.session import AuthSession

NameRule = Callable[[AuthSession, str], Optional[str]]


def username_to_email(username: str, domain: str) -> str:
    """Synthetic email for an account registered with a username only."""
    return f"{username.strip().lower()}@{domain}"


def login_email_for(identifier: str, domain: str) -> str:
    """Users may sign in with either their email or their username."""
    identifier = identifier.strip()
    if "@" in identifier:
        return identifier
    return username_to_email(identifier, domain)


def is_placeholder_email(email: Optional[str], domain: str) -> bool:
    return bool(email) and email.lower().endswith(f"@{domain.lower()}")


def token_name(session: AuthSession, domain: str) -> Optional[str]:
    return session.name


def placeholder_local_part(session: AuthSession, domain: str) -> Optional[str]:
    if is_placeholder_email(session.email, domain):
        return session.email.split("@")[0]
    return None


def email_local_part(session: AuthSession, domain: str) -> Optional[str]:
    if session.email:
        return session.email.split("@")[0]
    return None


def full_email(session: AuthSession, domain: str) -> Optional[str]:
    return session.email


def literal(value: str) -> NameRule:
    def rule(session: AuthSession, domain: str) -> Optional[str]:
        return value
    rule.__name__ = f"literal_{value.lower()}"
    return rule


# Authors of posts
POST_AUTHOR_RULES: Sequence[NameRule] = (
    token_name,
    placeholder_local_part,
    full_email,
    literal("Anonymous"),
)

# Comment authors and presence records
MEMBER_RULES: Sequence[NameRule] = (
    token_name,
    email_local_part,
    literal("User"),
)


def resolve_display_name(session: AuthSession, rules: Sequence[NameRule], domain: str) -> str:
    for rule in rules:
        name = rule(session, domain)
        if name and name.strip():
            return name
    raise ValueError("display-name rules must end with a literal fallback")
