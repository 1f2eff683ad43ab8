# app/api/auth/routes.py

import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from app.api.auth.schemas import RegisterSchema, LoginSchema, PasswordResetSchema
from app.core.exceptions import AppError
from app.core.security import token_required

auth_bp = Blueprint('auth_bp', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an account (username, optional email, password) and return its tokens."""
    auth_service = current_app.services['auth']
    try:
        data = RegisterSchema().load(request.get_json(silent=True) or {})
        session = auth_service.register(data['username'], data.get('email'), data['password'])
        return jsonify(session), 201
    except ValidationError as e:
        return jsonify({"error": "Invalid registration details.", "details": e.messages}), 400
    except AppError as e:
        return jsonify({"error": e.message}), e.status_code


@auth_bp.route('/login', methods=['POST'])
def login():
    """Password sign-in with a username or an email."""
    auth_service = current_app.services['auth']
    try:
        data = LoginSchema().load(request.get_json(silent=True) or {})
        session = auth_service.login(data['identifier'], data['password'])
        return jsonify(session), 200
    except ValidationError as e:
        return jsonify({"error": "Invalid username/email or password.", "details": e.messages}), 400
    except AppError as e:
        return jsonify({"error": e.message}), e.status_code


@auth_bp.route('/password-reset', methods=['POST'])
def password_reset():
    """Send a password reset email."""
    auth_service = current_app.services['auth']
    try:
        data = PasswordResetSchema().load(request.get_json(silent=True) or {})
    except ValidationError as e:
        return jsonify({"error": "Please enter your email address.", "details": e.messages}), 400

    email = data['email'].strip()
    if not email:
        return jsonify({"error": "Please enter your email address."}), 400

    try:
        auth_service.request_password_reset(email)
        return jsonify({"message": "Password reset email sent! Check your inbox."}), 200
    except AppError as e:
        return jsonify({"error": e.message}), e.status_code


@auth_bp.route('/logout', methods=['POST'])
@token_required()
def logout(session):
    """Sign out: revoke refresh tokens and mark the user offline."""
    auth_service = current_app.services['auth']
    try:
        auth_service.logout(session)
        return jsonify({"message": "Signed out."}), 200
    except Exception as e:
        logging.error(f"Logout failed (user_id: {session.uid}): {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500
