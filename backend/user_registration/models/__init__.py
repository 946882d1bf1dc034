"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: User account with hashed credentials and role assignments
- Role: Named permission group, many-to-many with User
"""
from .user import User
from .role import Role
