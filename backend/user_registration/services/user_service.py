# user_registration/services/user_service.py
"""
User Service

Registration pipeline, profile queries and profile/password mutations.

Registration runs as a single pass of hard gates, in order:
    0. input shape (all field errors collected and reported together)
    1. password policy
    2. password confirmation
    3. role names exist
    4. email not taken
    5. phone not taken
    6. hash, resolve roles, insert (one transaction)

Steps 4-5 are a check-then-act pair. Two concurrent registrations can both
pass them; the unique constraints on ``users.email`` / ``users.phone_number``
then reject the loser at insert time, and that rejection is reported with
the same ConflictError the pre-checks use.
"""
import logging
from typing import List, Optional

from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from user_registration.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from user_registration.core.security import PASSWORD_POLICY_MESSAGE, CredentialService
from user_registration.models.role import canonical_role_name
from user_registration.models.user import User
from user_registration.schemas.user import ProfileUpdateIn, RegistrationIn, UserRead
from user_registration.services.role_service import RoleService
from user_registration.services.validation import (
    distinct_role_names,
    normalize_country,
    normalize_email,
    normalize_optional,
    validate_profile_update,
    validate_registration,
)
from user_registration.stores.user_store import UserStore

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User with this email already exists"
PHONE_TAKEN = "User with this phone number already exists"


def _conflict_from_integrity(exc: IntegrityError) -> ConflictError:
    """Map a unique-constraint violation on users to the matching conflict."""
    if "phone" in str(exc).lower():
        return ConflictError(PHONE_TAKEN)
    return ConflictError(EMAIL_TAKEN)


class UserService:
    def __init__(self, users: UserStore, roles: RoleService, credentials: CredentialService):
        self.users = users
        self.roles = roles
        self.credentials = credentials

    # ----------------------------------------------------------- registration
    async def register(self, data: RegistrationIn) -> UserRead:
        email = normalize_email(data.email)
        logger.info("Attempting to register user with email: %s", email)

        errors = validate_registration(data)
        if errors:
            raise ValidationError("Validation failed", errors)

        if not self.credentials.meets_policy(data.password):
            raise ValidationError.for_field("password", PASSWORD_POLICY_MESSAGE)

        if data.password != data.confirmPassword:
            raise ValidationError.for_field("confirmPassword", "Passwords do not match")

        role_names = distinct_role_names(data.roles)
        invalid = await self.roles.validate_role_names(role_names)
        if invalid:
            names = ", ".join(sorted(invalid))
            raise ValidationError.for_field("roles", f"Invalid role(s): {names}", sorted(invalid))

        if await self.users.email_exists(email):
            raise ConflictError(EMAIL_TAKEN)

        phone = normalize_optional(data.phoneNumber)
        if phone and await self.users.phone_exists(phone):
            raise ConflictError(PHONE_TAKEN)

        password_hash = self.credentials.hash(data.password)
        try:
            async with in_transaction() as conn:
                roles = await self.roles.resolve_roles(role_names, conn=conn)
                if len(roles) != len(role_names):
                    raise ValidationError.for_field("roles", "One or more invalid roles provided", role_names)
                user = await self.users.create(
                    first_name=data.firstName.strip(),
                    last_name=data.lastName.strip(),
                    email=email,
                    password_hash=password_hash,
                    phone_number=phone,
                    country=normalize_country(data.country),
                    roles=roles,
                    conn=conn,
                )
        except IntegrityError as exc:
            logger.warning("Registration for %s lost a uniqueness race: %s", email, exc)
            raise _conflict_from_integrity(exc) from exc

        logger.info("Successfully registered user with ID: %s and email: %s", user.id, user.email)
        return UserRead.from_user(user)

    # ---------------------------------------------------------------- queries
    async def find_by_id(self, user_id: int) -> Optional[UserRead]:
        user = await self.users.get(user_id)
        return UserRead.from_user(user) if user else None

    async def get_user(self, user_id: int) -> UserRead:
        found = await self.find_by_id(user_id)
        if found is None:
            raise NotFoundError(f"User not found with ID: {user_id}")
        return found

    async def find_by_email(self, email: str) -> Optional[UserRead]:
        user = await self.users.get_by_email(normalize_email(email))
        return UserRead.from_user(user) if user else None

    async def find_by_country(self, country: str) -> List[UserRead]:
        return [UserRead.from_user(u) for u in await self.users.list_by_country(normalize_country(country) or "")]

    async def list_all(self) -> List[UserRead]:
        return [UserRead.from_user(u) for u in await self.users.list_all()]

    async def any_with_role(self, role_name: str) -> bool:
        return await self.users.any_with_role(canonical_role_name(role_name))

    async def email_available(self, email: str) -> bool:
        return not await self.users.email_exists(normalize_email(email))

    async def _require_by_email(self, email: str) -> User:
        user = await self.users.get_by_email(normalize_email(email))
        if user is None:
            raise NotFoundError("User not found")
        return user

    # -------------------------------------------------------------- mutations
    async def update_profile(self, email: str, data: ProfileUpdateIn) -> UserRead:
        """
        Update name, phone and country. Email, password and roles are not
        touched. ``None`` leaves a field as is; a blank phone or country
        clears it.
        """
        errors = validate_profile_update(data)
        if errors:
            raise ValidationError("Validation failed", errors)

        user = await self._require_by_email(email)

        if data.firstName is not None:
            user.first_name = data.firstName.strip()
        if data.lastName is not None:
            user.last_name = data.lastName.strip()
        if data.phoneNumber is not None:
            phone = normalize_optional(data.phoneNumber)
            if phone and phone != user.phone_number and await self.users.phone_exists(phone, exclude_id=user.id):
                raise ConflictError(PHONE_TAKEN)
            user.phone_number = phone
        if data.country is not None:
            user.country = normalize_country(data.country)

        try:
            await self.users.save(user)
        except IntegrityError as exc:
            raise _conflict_from_integrity(exc) from exc
        logger.info("Profile updated for user: %s", user.email)
        return UserRead.from_user(user)

    async def change_password(
        self, email: str, current_password: str, new_password: str, confirmation: str
    ) -> None:
        user = await self._require_by_email(email)
        if not self.credentials.verify(current_password, user.password_hash):
            logger.warning("Password change rejected for %s: current password mismatch", user.email)
            raise AuthenticationError("Current password is incorrect")
        if new_password != confirmation:
            raise ValidationError.for_field("confirmNewPassword", "Passwords do not match")
        if not self.credentials.meets_policy(new_password):
            raise ValidationError.for_field("newPassword", PASSWORD_POLICY_MESSAGE)

        user.password_hash = self.credentials.hash(new_password)
        await self.users.save(user)
        logger.info("Password changed for user: %s", user.email)

    async def delete_user(self, user_id: int) -> None:
        async with in_transaction() as conn:
            user = await self.users.get(user_id, conn=conn)
            if user is None:
                raise NotFoundError(f"User not found with ID: {user_id}")
            await self.users.delete(user, conn=conn)
        logger.info("Deleted user with ID: %s", user_id)
