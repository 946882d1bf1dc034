# user_registration/schemas/user.py
"""
Pydantic schemas for registration, profile and user administration.
Input models only check types; the business rules (name/email/phone
patterns, password policy, role set size) live in
``services.validation`` so every violation is reported as a field error.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from user_registration.models.user import User


class RegistrationIn(BaseModel):
    """Request model for the registration endpoint."""
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirmPassword: Optional[str] = None
    phoneNumber: Optional[str] = None  # E.164-like, e.g. "+15551234567"
    country: Optional[str] = None  # ISO 3166-1 alpha-2, e.g. "US"
    roles: List[str] = Field(default_factory=list)  # 1-3 role names, e.g. ["General User"]


class ProfileUpdateIn(BaseModel):
    """
    Request model for profile updates.
    All fields are optional - only provided fields will be updated.
    Email, password and roles cannot be changed here.
    """
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phoneNumber: Optional[str] = None  # Empty string clears the phone number
    country: Optional[str] = None  # Empty string clears the country


class PasswordChangeIn(BaseModel):
    """Request model for changing the current user's password."""
    currentPassword: str
    newPassword: str
    confirmNewPassword: str


class UserRead(BaseModel):
    """
    Sanitized read model of a user.
    Never carries the password hash.
    """
    id: int
    firstName: str
    lastName: str
    email: str
    phoneNumber: Optional[str] = None
    country: Optional[str] = None
    roles: List[str]  # Role display names, sorted
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserRead":
        """Build from a User whose roles have been fetched."""
        return cls(
            id=user.id,
            firstName=user.first_name,
            lastName=user.last_name,
            email=user.email,
            phoneNumber=user.phone_number,
            country=user.country,
            roles=sorted(role.name for role in user.roles),
            createdAt=user.created_at,
            updatedAt=user.updated_at,
        )
