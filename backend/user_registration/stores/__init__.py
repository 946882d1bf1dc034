"""
Store layer.

Thin repositories over the Tortoise models. Stores hold no business rules:
they read and write rows and let the database enforce uniqueness. Every
write accepts an optional ``conn`` so a service can run several writes in
one transaction.
"""
from .base import BaseStore
from .role_store import RoleStore
from .user_store import UserStore

__all__ = ["BaseStore", "RoleStore", "UserStore"]
