"""Shared pytest fixtures: in-memory Firestore, patched Firebase Auth, mocked storage bucket."""

from typing import Any, Iterator, List
from unittest.mock import MagicMock, patch

import pytest
from firebase_admin import auth as real_auth
from firebase_admin import firestore
from mockfirestore import MockFirestore
from mockfirestore.document import DocumentReference

from app import create_app
from app.models.session import AuthSession

PRIVATE_DOMAIN = "private.marneilx.com"

# token -> decoded claims, as firebase_admin.auth.verify_id_token would return them
CLAIMS = {
    "token-alice": {"uid": "alice", "name": "Alice", "email": "alice@example.com",
                    "picture": "https://example.com/alice.png"},
    "token-bob": {"uid": "bob", "email": f"bob@{PRIVATE_DOMAIN}"},
    "token-carol": {"uid": "carol", "email": "carol@example.com"},
}


class MockArrayUnion:
    def __init__(self, values: List[Any]) -> None:
        self.values = values

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)


class MockArrayRemove:
    def __init__(self, values: List[Any]) -> None:
        self.values = values

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)


def patch_mockfirestore() -> None:
    """Teach mockfirestore's DocumentReference.update about array transforms."""
    if hasattr(DocumentReference, "_orig_update"):
        return
    DocumentReference._orig_update = DocumentReference.update

    def patched_update(self: Any, data: dict) -> Any:
        current_data = self.get().to_dict() or {}
        new_data = {}
        for k, v in data.items():
            if isinstance(v, MockArrayUnion):
                merged = list(current_data.get(k) or [])
                for item in v.values:
                    if item not in merged:
                        merged.append(item)
                new_data[k] = merged
            elif isinstance(v, MockArrayRemove):
                new_data[k] = [i for i in (current_data.get(k) or []) if i not in v.values]
            else:
                new_data[k] = v
        return self._orig_update(new_data)

    DocumentReference.update = patched_update


def session_for(token: str) -> AuthSession:
    return AuthSession.from_claims(token, CLAIMS[token])


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _verify_id_token(token, check_revoked=False):
    if token not in CLAIMS:
        raise real_auth.InvalidIdTokenError("Token has expired or is malformed")
    return dict(CLAIMS[token])


@pytest.fixture
def db(monkeypatch):
    patch_mockfirestore()
    monkeypatch.setattr(firestore, "ArrayUnion", MockArrayUnion)
    monkeypatch.setattr(firestore, "ArrayRemove", MockArrayRemove)
    return MockFirestore()


@pytest.fixture
def firebase_auth():
    """firebase_admin.auth as seen by IdentityService, with real exception classes."""
    with patch("app.services.identity_service.firebase_auth") as mock_auth:
        for name in ("InvalidIdTokenError", "UserDisabledError", "EmailAlreadyExistsError", "UserNotFoundError"):
            setattr(mock_auth, name, getattr(real_auth, name))
        mock_auth.verify_id_token.side_effect = _verify_id_token
        yield mock_auth


@pytest.fixture
def bucket():
    bucket = MagicMock()
    bucket.name = "test-bucket"

    def make_blob(path):
        blob = MagicMock()
        blob.name = path
        blob.public_url = f"https://storage.googleapis.com/test-bucket/{path}"
        blob.exists.return_value = True
        blob.generate_signed_url.return_value = f"https://signed.example/{path}"
        return blob

    bucket.blob.side_effect = make_blob
    return bucket


@pytest.fixture
def app(db, firebase_auth, bucket):
    app = create_app('testing', {
        "FIRESTORE_CLIENT": db,
        "FIREBASE_WEB_API_KEY": "test-api-key",
    })
    app.services['storage'].bucket = bucket
    app.services['identity'].http = MagicMock()
    return app


@pytest.fixture
def client(app):
    return app.test_client()
