# app/api/auth/services.py
import logging
from typing import Dict, Any, Optional

from app.api.presence.services import PresenceService
from app.models.session import AuthSession
from app.services.identity_service import IdentityService


class AuthService:
    """Account flows built on the identity service."""

    def __init__(self, identity_service: IdentityService, presence_service: PresenceService):
        self.identity = identity_service
        self.presence = presence_service

    def register(self, username: str, email: Optional[str], password: str) -> Dict[str, Any]:
        """Create the account and sign it in straight away."""
        account = self.identity.create_account(username, email, password)
        tokens = self.identity.sign_in(account["email"], password)
        tokens["displayName"] = tokens.get("displayName") or account["displayName"]
        return tokens

    def login(self, identifier: str, password: str) -> Dict[str, Any]:
        return self.identity.sign_in(identifier, password)

    def request_password_reset(self, email: str) -> None:
        self.identity.send_password_reset(email)

    def logout(self, session: AuthSession) -> None:
        """Revoke refresh tokens and drop the user from the online list."""
        self.identity.revoke_sessions(session.uid)
        try:
            self.presence.mark_offline(session.uid)
        except Exception as e:
            logging.error(f"Failed to mark user offline (user_id: {session.uid}): {e}", exc_info=True)
        logging.info(f"User signed out (user_id: {session.uid})")
