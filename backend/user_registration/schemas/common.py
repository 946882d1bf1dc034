# user_registration/schemas/common.py
"""
Uniform response envelope shared by every endpoint.
"""
from typing import Any, List, Optional

from pydantic import BaseModel


class FieldErrorOut(BaseModel):
    """A field-level validation error as returned to clients."""
    field: str  # Request field name (camelCase, as sent)
    message: str  # Human-readable reason
    rejectedValue: Any = None  # Offending value (never set for password fields)


class ApiResponse(BaseModel):
    """
    Envelope wrapping all responses.
    ``data`` is set on success, ``errors`` only for validation failures.
    """
    success: bool
    message: str
    data: Optional[Any] = None
    errors: Optional[List[FieldErrorOut]] = None
