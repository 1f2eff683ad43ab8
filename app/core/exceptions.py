# app/core/exceptions.py
"""Application error types. Each carries the HTTP status it maps to."""


class AppError(Exception):
    """Base application error class."""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class AuthenticationError(AppError):
    """Raised when a request carries no usable identity."""

    def __init__(self, message="Unauthorized"):
        super().__init__(message, 401)


class InvalidTokenError(AuthenticationError):
    """Raised when the identity service rejects a bearer token."""

    def __init__(self, message="Invalid token"):
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    def __init__(self, message="Invalid username/email or password."):
        super().__init__(message)


class DuplicateAccountError(AppError):
    def __init__(self, message="Username or Email already taken."):
        super().__init__(message, 409)


class AccountNotFoundError(AppError):
    def __init__(self, message="No user found with that email address."):
        super().__init__(message, 404)


class NotFoundError(AppError):
    """Raised when a resource is not found."""

    def __init__(self, message="Resource not found."):
        super().__init__(message, 404)


class ForbiddenError(AppError):
    """Raised when the caller does not own the resource."""

    def __init__(self, message="You do not have permission to perform this action."):
        super().__init__(message, 403)


class BackendServiceError(AppError):
    """Raised when a hosted Firebase service answers with an unexpected failure."""

    def __init__(self, message="Backend service error."):
        super().__init__(message, 500)
