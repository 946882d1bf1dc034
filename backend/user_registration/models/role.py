# user_registration/models/role.py
"""
Database model for roles.
A role is a named permission group (e.g. "General User", "Admin") assigned
to users through the ``user_roles`` many-to-many table owned by User.
"""
from typing import TYPE_CHECKING

from tortoise import fields, models

if TYPE_CHECKING:
    from user_registration.models.user import User

# Predefined role names
GENERAL_USER = "General User"
PROFESSIONAL = "Professional"
BUSINESS_OWNER = "Business Owner"
ADMIN = "Admin"

# Default roles with descriptions, seeded at startup and protected from deletion
DEFAULT_ROLES: dict[str, str] = {
    GENERAL_USER: "Standard user with basic access permissions",
    PROFESSIONAL: "Professional user with advanced features access",
    BUSINESS_OWNER: "Business owner with full business management capabilities",
    ADMIN: "System administrator with full access",
}


def canonical_role_name(name: str) -> str:
    """
    Lookup key for a role name.

    Underscores and hyphens count as spaces, whitespace runs collapse, and
    the result is uppercased, so "general_user", "General User" and
    "GENERAL  USER" all map to "GENERAL USER".
    """
    cleaned = (name or "").replace("_", " ").replace("-", " ")
    return " ".join(cleaned.split()).upper()


PROTECTED_ROLE_KEYS = frozenset(canonical_role_name(n) for n in DEFAULT_ROLES)


class Role(models.Model):
    """
    Role database model.

    Relationships:
    - Has many Users (many-to-many, owned by User via ``User.roles``).
      The reverse side is only ever queried for counts, never loaded in bulk.

    Uniqueness:
    - ``name_key`` (canonical form) is unique, so "Admin" and "ADMIN" cannot coexist
    - ``name`` keeps the casing the role was created with, for display
    """
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=50)  # Display name, original casing
    name_key = fields.CharField(max_length=50, unique=True, index=True)  # Canonical lookup key
    description = fields.CharField(max_length=255, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    users: fields.ManyToManyRelation["User"]

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "roles"

    @property
    def is_protected(self) -> bool:
        return self.name_key in PROTECTED_ROLE_KEYS

    def __str__(self) -> str:
        return self.name
