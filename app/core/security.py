# app/core/security.py
from functools import wraps
from typing import Optional

from flask import request, jsonify, current_app

from app.core.exceptions import InvalidTokenError


def extract_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    """Token from an `Authorization: Bearer <token>` header, None when absent or malformed."""
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header[len("Bearer "):].strip()
    return token or None


def token_required(optional: bool = False, message: str = "Unauthorized"):
    """
    Verify the bearer token with the identity service and hand the resulting
    AuthSession to the view as the `session` keyword argument.

    :param optional: let anonymous requests through with session=None
    :param message: error returned when the header is missing or malformed
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            token = extract_bearer_token(request.headers.get("Authorization"))
            if token is None:
                if optional:
                    return f(*args, session=None, **kwargs)
                return jsonify({"error": message}), 401

            identity_service = current_app.services['identity']
            try:
                session = identity_service.verify_session(token)
            except InvalidTokenError as e:
                return jsonify({"error": e.message}), 401

            return f(*args, session=session, **kwargs)

        return decorated_function

    return decorator
