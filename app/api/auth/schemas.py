#app/api/auth/schemas.py
from marshmallow import Schema, fields, validate


class RegisterSchema(Schema):
    """Sign-up request. Email is optional; username-only accounts get a private email."""
    username = fields.Str(required=True, validate=validate.Regexp(
        r"^[A-Za-z0-9_.-]{3,30}$",
        error="Username must be 3-30 letters, digits, '.', '_' or '-'."
    ))
    email = fields.Email(load_default=None, allow_none=True)
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=6))


class LoginSchema(Schema):
    """Sign-in with either a username or an email."""
    identifier = fields.Str(required=True, validate=validate.Length(min=1))
    password = fields.Str(required=True, load_only=True)


class PasswordResetSchema(Schema):
    email = fields.Str(load_default="")
