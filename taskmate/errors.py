"""Error taxonomy shared by the services and the API layer.

Every error carries the HTTP status it maps to; the handlers in
``taskmate.main`` turn them into ``{"success": false, "message": ...}``.
"""

from typing import Optional


class TaskMateError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskMateError):
    status_code = 400
    default_message = "Invalid input"


class DuplicateEmailError(ValidationError):
    default_message = "User already exists with this email"


class AuthenticationError(TaskMateError):
    status_code = 401
    default_message = "Not authorized"


class InvalidCredentialsError(AuthenticationError):
    default_message = "Invalid email or password"


class InvalidTokenError(AuthenticationError):
    default_message = "Not authorized, invalid or expired token"


class ExpiredTokenError(InvalidTokenError):
    """Raised for expired tokens; clients see the same message as for bad ones."""


class PasswordResetDisabledError(TaskMateError):
    status_code = 403
    default_message = "Password reset is disabled"


class NotFoundError(TaskMateError):
    status_code = 404
    default_message = "Not found"


class UserNotFoundError(NotFoundError):
    default_message = "User not found"


class TaskNotFoundError(NotFoundError):
    default_message = "Task not found"
