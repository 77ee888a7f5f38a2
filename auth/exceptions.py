"""
Authentication error taxonomy.

Each error carries the user-facing ``message`` and the HTTP status the
API layer answers with.
"""

from __future__ import annotations


class AuthError(Exception):
    status_code = 400
    default_message = "Authentication error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateUsername(AuthError):
    default_message = "Username already exists"


class DuplicateEmail(AuthError):
    default_message = "Email already exists"


class InvalidCredentials(AuthError):
    # Shared by "unknown user" and "wrong password".
    default_message = "Invalid username or password"


class InvalidToken(AuthError):
    status_code = 401
    default_message = "Invalid or expired token"


class Unauthorized(AuthError):
    status_code = 401
    default_message = "Authentication required"


class InternalError(AuthError):
    status_code = 500
    default_message = "An internal error occurred"
