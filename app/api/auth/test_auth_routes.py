# app/api/auth/test_auth_routes.py

from unittest.mock import MagicMock

import requests
from firebase_admin import auth as real_auth

from app.conftest import auth_headers


def _response(status_code, body):
    response = MagicMock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.json.return_value = body
    response.text = str(body)
    return response


def _sign_in_ok(email="alice@example.com", display_name="Alice"):
    return _response(200, {
        "localId": "alice",
        "email": email,
        "displayName": display_name,
        "idToken": "id-token",
        "refreshToken": "refresh-token",
        "expiresIn": "3600",
    })


def _identity_error(message):
    return _response(400, {"error": {"code": 400, "message": message}})


def test_login_with_email(client, app):
    http = app.services['identity'].http
    http.post.return_value = _sign_in_ok()

    response = client.post('/api/auth/login', json={"identifier": "alice@example.com", "password": "secret1"})
    assert response.status_code == 200
    body = response.get_json()
    assert body == {
        "uid": "alice",
        "email": "alice@example.com",
        "displayName": "Alice",
        "idToken": "id-token",
        "refreshToken": "refresh-token",
        "expiresIn": 3600,
    }

    args, kwargs = http.post.call_args
    assert args[0].endswith("/accounts:signInWithPassword")
    assert kwargs["params"] == {"key": "test-api-key"}
    assert kwargs["json"]["email"] == "alice@example.com"


def test_login_with_username_uses_private_email(client, app):
    http = app.services['identity'].http
    http.post.return_value = _sign_in_ok(email="bob@private.marneilx.com", display_name="")

    response = client.post('/api/auth/login', json={"identifier": "Bob", "password": "secret1"})
    assert response.status_code == 200
    assert response.get_json()["displayName"] is None
    assert http.post.call_args.kwargs["json"]["email"] == "bob@private.marneilx.com"


def test_login_bad_credentials(client, app):
    app.services['identity'].http.post.return_value = _identity_error("INVALID_LOGIN_CREDENTIALS")

    response = client.post('/api/auth/login', json={"identifier": "alice", "password": "wrong"})
    assert response.status_code == 401
    assert response.get_json() == {"error": "Invalid username/email or password."}


def test_login_backend_failure(client, app):
    http = app.services['identity'].http
    http.post.return_value = _identity_error("TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled")
    assert client.post('/api/auth/login', json={"identifier": "alice", "password": "x"}).status_code == 500

    http.post.side_effect = requests.ConnectionError("down")
    assert client.post('/api/auth/login', json={"identifier": "alice", "password": "x"}).status_code == 500


def test_login_validation(client):
    response = client.post('/api/auth/login', json={"identifier": "alice"})
    assert response.status_code == 400


def test_register_username_only(client, app, firebase_auth):
    firebase_auth.create_user.return_value = MagicMock(
        uid="dave", email="dave@private.marneilx.com", display_name="dave")
    app.services['identity'].http.post.return_value = _sign_in_ok(email="dave@private.marneilx.com", display_name="")

    response = client.post('/api/auth/register', json={"username": "dave", "password": "secret1"})
    assert response.status_code == 201
    assert response.get_json()["displayName"] == "dave"

    firebase_auth.create_user.assert_called_once_with(
        email="dave@private.marneilx.com", password="secret1", display_name="dave")


def test_register_duplicate(client, firebase_auth):
    firebase_auth.create_user.side_effect = real_auth.EmailAlreadyExistsError("exists", None, None)

    response = client.post('/api/auth/register',
                           json={"username": "alice", "email": "alice@example.com", "password": "secret1"})
    assert response.status_code == 409
    assert response.get_json() == {"error": "Username or Email already taken."}


def test_register_validation(client, firebase_auth):
    for body in ({"username": "a", "password": "secret1"},
                 {"username": "has space", "password": "secret1"},
                 {"username": "alice", "password": "123"},
                 {"username": "alice", "email": "not-an-email", "password": "secret1"}):
        assert client.post('/api/auth/register', json=body).status_code == 400
    firebase_auth.create_user.assert_not_called()


def test_password_reset(client, app):
    http = app.services['identity'].http
    http.post.return_value = _response(200, {"email": "alice@example.com"})

    response = client.post('/api/auth/password-reset', json={"email": " alice@example.com "})
    assert response.status_code == 200
    assert response.get_json() == {"message": "Password reset email sent! Check your inbox."}
    assert http.post.call_args.kwargs["json"] == {"requestType": "PASSWORD_RESET", "email": "alice@example.com"}


def test_password_reset_errors(client, app):
    response = client.post('/api/auth/password-reset', json={"email": "  "})
    assert response.status_code == 400
    assert response.get_json() == {"error": "Please enter your email address."}

    app.services['identity'].http.post.return_value = _identity_error("EMAIL_NOT_FOUND")
    response = client.post('/api/auth/password-reset', json={"email": "nobody@example.com"})
    assert response.status_code == 404
    assert response.get_json() == {"error": "No user found with that email address."}


def test_logout(client, db, firebase_auth):
    client.post('/api/presence/heartbeat', headers=auth_headers("token-alice"))

    response = client.post('/api/auth/logout', headers=auth_headers("token-alice"))
    assert response.status_code == 200
    firebase_auth.revoke_refresh_tokens.assert_called_once_with("alice")
    assert db.collection('users').document("alice").get().to_dict()["isOnline"] is False

    body = client.get('/api/presence/online', headers=auth_headers("token-bob")).get_json()
    assert body["total"] == 0
    assert body["users"] == []

    assert client.post('/api/auth/logout').status_code == 401


def test_register_username_is_lowercased_into_private_email(client, app, firebase_auth):
    firebase_auth.create_user.return_value = MagicMock(
        uid="jane", email="jane.doe_1@private.marneilx.com", display_name="Jane.Doe_1")
    app.services['identity'].http.post.return_value = _sign_in_ok(
        email="jane.doe_1@private.marneilx.com", display_name="Jane.Doe_1")

    response = client.post('/api/auth/register', json={"username": "Jane.Doe_1", "password": "secret1"})
    assert response.status_code == 201
    firebase_auth.create_user.assert_called_once_with(
        email="jane.doe_1@private.marneilx.com", password="secret1", display_name="Jane.Doe_1")
