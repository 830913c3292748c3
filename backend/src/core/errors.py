"""
Error taxonomy shared by services, auth dependencies and API routes.

Each error is an HTTPException with a fixed status code so it can be raised
anywhere in the request path; main.py renders all of them in the
``{"success": false, "message": ...}`` envelope.
"""

from typing import Optional

from fastapi import HTTPException, status


GENERIC_AUTHENTICATION_MESSAGE = "Not authorized to access this route"
GENERIC_AUTHORIZATION_MESSAGE = "Not authorized"
NO_CENTER_MESSAGE = "لا يوجد مركز مرتبط بحسابك"
CENTER_ACCESS_DENIED_MESSAGE = "غير مصرح للوصول إلى هذا المركز"


class AppError(HTTPException):
    """Base class for errors with a fixed HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationError(AppError):
    """Missing or malformed input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(AppError):
    """
    Missing, malformed, forged or expired token, the actor no longer exists,
    or a failed login.

    Token failures always carry the generic message so callers cannot tell
    the causes apart.
    """
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = GENERIC_AUTHENTICATION_MESSAGE


class AuthorizationError(AppError):
    """Role or relationship check failed."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = GENERIC_AUTHORIZATION_MESSAGE


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    """A uniqueness constraint was hit by the store."""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflicting update, please retry"


class DuplicateEmailError(ConflictError):
    """Email already used by a parent, specialist or admin."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User already exists"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
