# user_registration/core/errors.py
"""
Typed service errors.

Services raise these at their boundary; the HTTP layer translates each kind
into a status code and the response envelope in one place
(see ``api/v1/errors.py``). Anything that is not a ``ServiceError`` is
treated as an internal failure.
"""
from dataclasses import dataclass
from typing import Any, List, Optional


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure."""
    field: str
    message: str
    rejected_value: Any = None

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message, "rejectedValue": self.rejected_value}


class ServiceError(Exception):
    """Base class for business-rule violations raised by services."""
    status_code: int = 400
    default_message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Malformed input or a violated input rule. Carries field errors."""
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[FieldError]] = None):
        super().__init__(message)
        self.errors: List[FieldError] = list(errors or [])

    @classmethod
    def for_field(cls, field: str, message: str, rejected_value: Any = None) -> "ValidationError":
        return cls(message, [FieldError(field, message, rejected_value)])


class ConflictError(ServiceError):
    """Duplicate email/phone/role, role in use, protected role."""
    status_code = 409
    default_message = "Resource already exists"


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "Resource not found"


class AuthenticationError(ServiceError):
    """Bad credentials or unusable token. The message stays generic."""
    status_code = 401
    default_message = "Invalid email or password"


class InternalError(ServiceError):
    status_code = 500
    default_message = "An unexpected error occurred. Please try again later."
