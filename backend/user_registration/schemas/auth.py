# user_registration/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request/response models for login and current-user information.
"""
from typing import List

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """
    Request model for user login endpoint.
    Contains credentials for authentication.
    """
    email: str  # Login identifier (matched case-insensitively)
    password: str  # User password (plain text, verified server-side)


class IdentityOut(BaseModel):
    """
    Identity returned by login and /auth/me.
    Contains basic user details without sensitive information.
    """
    userId: int
    email: str
    firstName: str
    lastName: str
    roles: List[str]


class LoginResult(IdentityOut):
    """
    Response model for successful login.
    Adds the access token used for authenticated requests.
    """
    token: str
    tokenType: str = "Bearer"


class EmailAvailabilityOut(BaseModel):
    email: str
    available: bool

