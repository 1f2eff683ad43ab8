# app/services/identity_service.py

import logging
from typing import Any, Dict, Optional

import requests
from firebase_admin import auth as firebase_auth
from flask import Flask

from app.core.exceptions import (
    AccountNotFoundError,
    BackendServiceError,
    DuplicateAccountError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from app.models.session import AuthSession
from app.utils.display_name import login_email_for, username_to_email

# Identity Toolkit error codes that mean "wrong identifier or password"
_BAD_CREDENTIAL_CODES = {"INVALID_LOGIN_CREDENTIALS", "EMAIL_NOT_FOUND", "INVALID_PASSWORD", "INVALID_EMAIL"}


class IdentityService:
    """
    Talks to Firebase Authentication.
    Token verification and account creation go through the Admin SDK;
    password sign-in and reset mails go through the Identity Toolkit REST API,
    which the Admin SDK does not expose.
    """

    def __init__(self):
        self.api_key: Optional[str] = None
        self.base_url: Optional[str] = None
        self.private_domain: Optional[str] = None
        self.timeout: float = 10
        self.check_revoked: bool = False
        self.http = requests.Session()

    def init_app(self, app: Flask):
        self.api_key = app.config.get('FIREBASE_WEB_API_KEY')
        self.base_url = app.config['IDENTITY_TOOLKIT_URL'].rstrip('/')
        self.private_domain = app.config['PRIVATE_EMAIL_DOMAIN']
        self.timeout = app.config.get('IDENTITY_REQUEST_TIMEOUT', 10)
        self.check_revoked = app.config.get('VERIFY_REVOKED_TOKENS', False)
        if not self.api_key:
            logging.warning("IdentityService: FIREBASE_WEB_API_KEY is not set, password sign-in is unavailable.")

    # --- Token verification ---
    def verify_session(self, token: str) -> AuthSession:
        """Verify a Firebase ID token and return the caller's session."""
        try:
            claims = firebase_auth.verify_id_token(token, check_revoked=self.check_revoked)
        except (firebase_auth.InvalidIdTokenError, firebase_auth.UserDisabledError, ValueError) as e:
            # Expired and revoked tokens are InvalidIdTokenError subclasses
            logging.warning(f"Rejected bearer token: {e}")
            raise InvalidTokenError()
        return AuthSession.from_claims(token, claims)

    # --- Accounts ---
    def create_account(self, username: str, email: Optional[str], password: str) -> Dict[str, Any]:
        """Create an account; username-only sign-ups get a synthetic email."""
        final_email = email or username_to_email(username, self.private_domain)
        try:
            user = firebase_auth.create_user(email=final_email, password=password, display_name=username)
        except firebase_auth.EmailAlreadyExistsError:
            raise DuplicateAccountError()
        logging.info(f"Account created (uid: {user.uid})")
        return {"uid": user.uid, "email": user.email, "displayName": user.display_name}

    def sign_in(self, identifier: str, password: str) -> Dict[str, Any]:
        """Password sign-in with an email or a username."""
        email = login_email_for(identifier, self.private_domain)
        data = self._call("signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        }, on_error={code: InvalidCredentialsError for code in _BAD_CREDENTIAL_CODES})
        return {
            "uid": data.get("localId"),
            "email": data.get("email"),
            "displayName": data.get("displayName") or None,
            "idToken": data.get("idToken"),
            "refreshToken": data.get("refreshToken"),
            "expiresIn": int(data.get("expiresIn", 3600)),
        }

    def send_password_reset(self, email: str) -> None:
        self._call("sendOobCode", {
            "requestType": "PASSWORD_RESET",
            "email": email,
        }, on_error={"EMAIL_NOT_FOUND": AccountNotFoundError})
        logging.info("Password reset email requested")

    def revoke_sessions(self, uid: str) -> None:
        try:
            firebase_auth.revoke_refresh_tokens(uid)
        except firebase_auth.UserNotFoundError:
            logging.warning(f"Refresh token revocation skipped, user no longer exists (uid: {uid})")

    def _call(self, method: str, payload: Dict[str, Any], on_error: Dict[str, type]) -> Dict[str, Any]:
        if not self.api_key:
            raise BackendServiceError("Password authentication is not configured.")

        try:
            response = self.http.post(
                f"{self.base_url}/accounts:{method}",
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logging.error(f"Identity Toolkit request failed ({method}): {e}", exc_info=True)
            raise BackendServiceError(str(e))

        if response.ok:
            return response.json()

        message = _error_message(response)
        # Messages look like "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account..."
        code = message.split(" ")[0].split(":")[0].strip()
        error_cls = on_error.get(code)
        if error_cls is not None:
            raise error_cls()
        logging.error(f"Identity Toolkit {method} failed ({response.status_code}): {message}")
        raise BackendServiceError(message)


def _error_message(response: requests.Response) -> str:
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return response.text or f"HTTP {response.status_code}"
