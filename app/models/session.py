# app/models/session.py
from dataclasses import dataclass, field
from typing import Optional, Dict, Any


@dataclass(frozen=True)
class AuthSession:
    """
    Identity of the caller, verified from a bearer token.
    Handlers receive it explicitly instead of reading global auth state.
    """
    uid: str
    token: str
    name: Optional[str] = None
    email: Optional[str] = None
    picture: Optional[str] = None
    claims: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_claims(cls, token: str, claims: Dict[str, Any]) -> "AuthSession":
        return cls(
            uid=claims['uid'],
            token=token,
            name=claims.get('name'),
            email=claims.get('email'),
            picture=claims.get('picture'),
            claims=dict(claims),
        )
