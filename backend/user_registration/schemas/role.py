# user_registration/schemas/role.py
"""
Pydantic schemas for role listing and administration.
"""
from typing import Optional

from pydantic import BaseModel, Field

from user_registration.models.role import Role


class RoleCreateIn(BaseModel):
    """Request model for creating a role (admin only)."""
    name: str = Field(min_length=2, max_length=50)  # Display name; uniqueness is case-insensitive
    description: Optional[str] = Field(default=None, max_length=255)


class RoleUpdateIn(BaseModel):
    """
    Request model for updating a role (admin only).
    Omitted fields are left unchanged; a blank description clears it.
    """
    name: Optional[str] = Field(default=None, max_length=50)
    description: Optional[str] = Field(default=None, max_length=255)


class RoleRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    protected: bool = False  # Default roles cannot be deleted or renamed

    @classmethod
    def from_role(cls, role: Role) -> "RoleRead":
        return cls(id=role.id, name=role.name, description=role.description, protected=role.is_protected)
