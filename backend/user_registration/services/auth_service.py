# user_registration/services/auth_service.py
"""
Auth Service

Checks credentials against the user store and issues access tokens.
Unknown email and wrong password produce the same error so responses do not
reveal whether an account exists.
"""
import logging

from user_registration.core.errors import AuthenticationError, NotFoundError
from user_registration.core.security import CredentialService, TokenService
from user_registration.models.user import User
from user_registration.schemas.auth import IdentityOut, LoginResult
from user_registration.services.validation import normalize_email
from user_registration.stores.user_store import UserStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def _role_names(user: User) -> list[str]:
    return sorted(role.name for role in user.roles)


def _identity(user: User) -> dict:
    return {
        "userId": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "roles": _role_names(user),
    }


class AuthService:
    def __init__(self, users: UserStore, credentials: CredentialService, tokens: TokenService):
        self.users = users
        self.credentials = credentials
        self.tokens = tokens

    async def authenticate(self, email: str, password: str) -> LoginResult:
        normalized = normalize_email(email)
        logger.info("Authenticating user: %s", normalized)

        user = await self.users.get_by_email(normalized) if normalized else None
        if user is None or not self.credentials.verify(password, user.password_hash):
            logger.warning("Invalid login attempt for: %s", normalized)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if self.credentials.needs_rehash(user.password_hash):
            user.password_hash = self.credentials.hash(password)
            await self.users.save(user)
            logger.info("Upgraded password hash for user: %s", user.email)

        token = self.tokens.issue(user.id, user.email, _role_names(user))
        logger.info("User authenticated successfully: %s", user.email)
        return LoginResult(token=token, **_identity(user))

    async def get_current_user(self, email: str) -> IdentityOut:
        """Identity and roles for an already authenticated user; no new token."""
        user = await self.users.get_by_email(normalize_email(email))
        if user is None:
            raise NotFoundError("User not found")
        return IdentityOut(**_identity(user))

    async def user_from_token(self, token: str) -> User:
        """
        Resolve a bearer token to its user.

        Raises:
            AuthenticationError: token invalid/expired, or its user no longer exists
        """
        claims = self.tokens.parse(token)
        user = await self.users.get_by_email(claims.email)
        if user is None or user.id != claims.user_id:
            raise AuthenticationError("Invalid token")
        return user
