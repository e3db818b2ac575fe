"""Domain exception hierarchy translated into HTTP responses by the error handlers."""
from __future__ import annotations


class AdvisoryError(Exception):
    """Base class for errors raised by services and mapped onto HTTP statuses."""

    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EntityNotFoundError(AdvisoryError):
    """The requested record does not exist (or is not visible to the caller)."""

    status_code = 404
    error = "Not Found"

    @classmethod
    def for_entity(cls, entity: str, identifier: object) -> "EntityNotFoundError":
        return cls(f"{entity} not found with id: {identifier}")


class ValidationError(AdvisoryError):
    """Input failed validation."""

    status_code = 400
    error = "Bad Request"


class DuplicateResourceError(AdvisoryError):
    status_code = 409
    error = "Conflict"


class BusinessRuleError(AdvisoryError):
    """The request is well formed but violates a domain rule."""

    status_code = 422
    error = "Unprocessable Entity"


class AuthenticationError(AdvisoryError):
    """Raised when authentication or token validation fails."""

    status_code = 401
    error = "Unauthorized"


class AccessDeniedError(AdvisoryError):
    status_code = 403
    error = "Forbidden"


__all__ = [
    "AccessDeniedError",
    "AdvisoryError",
    "AuthenticationError",
    "BusinessRuleError",
    "DuplicateResourceError",
    "EntityNotFoundError",
    "ValidationError",
]
