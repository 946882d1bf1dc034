# user_registration/models/user.py
"""
Database model for users.
Represents a user account in the system, containing authentication credentials,
profile information, and role assignments.
"""
from typing import TYPE_CHECKING

from tortoise import fields, models

if TYPE_CHECKING:
    from user_registration.models.role import Role


class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many Roles (many-to-many through ``user_roles``; User owns the link)

    Security:
    - Password is stored as a bcrypt hash (never store plain text passwords)
    - Email is stored trimmed and lowercase and must be unique
    - Phone number must be unique when present (NULLs do not collide)
    """
    id = fields.IntField(primary_key=True)
    first_name = fields.CharField(max_length=100)
    last_name = fields.CharField(max_length=100)
    email = fields.CharField(max_length=255, unique=True, index=True)  # Login identifier, lowercase
    password_hash = fields.CharField(max_length=255)
    phone_number = fields.CharField(max_length=20, unique=True, null=True)
    country = fields.CharField(max_length=2, null=True)  # ISO 3166-1 alpha-2
    created_at = fields.DatetimeField(auto_now_add=True)  # Set once on insert
    updated_at = fields.DatetimeField(auto_now=True)

    roles: fields.ManyToManyRelation["Role"] = fields.ManyToManyField(
        "models.Role",
        related_name="users",
        through="user_roles",
    )

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
