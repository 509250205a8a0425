"""HTTP error taxonomy shared by the route handlers.

Each error is an ``HTTPException`` that already knows its status code, so a
handler only has to pick the right class and describe what went wrong.
"""

from typing import Any

from fastapi import HTTPException, status

from showcase.core import config


class ShowcaseError(HTTPException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: Any = "Server error"

    def __init__(self, detail: Any = None, headers: dict[str, str] | None = None) -> None:
        super().__init__(
            status_code=self.http_status,
            detail=self.default_detail if detail is None else detail,
            headers=headers,
        )


class Unauthenticated(ShowcaseError):
    http_status = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"

    def __init__(self, detail: Any = None) -> None:
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentials(ShowcaseError):
    http_status = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid credentials"


class Forbidden(ShowcaseError):
    http_status = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class NotFound(ShowcaseError):
    http_status = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ValidationError(ShowcaseError):
    http_status = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation error"


class InvalidRole(ValidationError):
    default_detail = "Invalid role"


class DuplicateEmail(ShowcaseError):
    http_status = status.HTTP_400_BAD_REQUEST
    default_detail = "User already exists with this email"


class SelfDeletionForbidden(ShowcaseError):
    http_status = status.HTTP_400_BAD_REQUEST
    default_detail = "Cannot delete your own account"


class InternalFault(ShowcaseError):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Server error"


def internal_fault(message: str, exc: BaseException | None = None) -> InternalFault:
    """Build an ``InternalFault`` that only exposes ``exc`` text in development."""
    error = str(exc) if exc is not None and config.is_development() else "Internal server error"
    return InternalFault({"message": message, "error": error})
