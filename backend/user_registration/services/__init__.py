"""
Services Module

Business logic over the store layer:
- RoleService: role catalog, name validation, default role seeding
- UserService: registration pipeline, profile queries and updates
- AuthService: credential checks and token issuance

``build_services`` is the composition root: it constructs every store and
service with its collaborators passed in explicitly.
"""
from dataclasses import dataclass

from ..config import Settings, settings as default_settings
from ..core.security import CredentialService, TokenService
from ..stores import RoleStore, UserStore
from .auth_service import AuthService
from .role_service import RoleService
from .user_service import UserService


@dataclass
class Services:
    credentials: CredentialService
    tokens: TokenService
    roles: RoleService
    users: UserService
    auth: AuthService


def build_services(settings: Settings = default_settings) -> Services:
    credentials = CredentialService(rounds=settings.bcrypt_rounds)
    tokens = TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_alg,
        expire_minutes=settings.access_token_expire_minutes,
    )
    user_store = UserStore()
    roles = RoleService(RoleStore())
    users = UserService(user_store, roles, credentials)
    auth = AuthService(user_store, credentials, tokens)
    return Services(credentials=credentials, tokens=tokens, roles=roles, users=users, auth=auth)


__all__ = [
    "AuthService",
    "RoleService",
    "UserService",
    "Services",
    "build_services",
]
