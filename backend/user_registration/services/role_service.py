# user_registration/services/role_service.py
"""
Role Service

CRUD and validation over roles. All name comparisons go through
``canonical_role_name``; the display name keeps whatever casing the role
was created with.
"""
import logging
from typing import Iterable, List, Optional

from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from user_registration.core.errors import ConflictError, NotFoundError, ValidationError
from user_registration.models.role import DEFAULT_ROLES, Role, canonical_role_name
from user_registration.stores.role_store import RoleStore

logger = logging.getLogger(__name__)


class RoleService:
    def __init__(self, roles: RoleStore):
        self.roles = roles

    # ---------------------------------------------------------------- queries
    async def list_roles(self) -> List[Role]:
        return await self.roles.list_all()

    async def list_role_names(self) -> List[str]:
        return [role.name for role in await self.roles.list_all()]

    async def get_role(self, role_id: int) -> Role:
        role = await self.roles.get(role_id)
        if role is None:
            raise NotFoundError(f"Role not found with ID: {role_id}")
        return role

    async def get_role_by_name(self, name: str) -> Optional[Role]:
        return await self.roles.get_by_key(canonical_role_name(name))

    async def role_exists(self, name: str) -> bool:
        key = canonical_role_name(name)
        return bool(key) and await self.roles.key_exists(key)

    async def validate_role_names(self, names: Iterable[str]) -> set[str]:
        """Return the requested names (as given) that match no existing role."""
        available = await self.roles.all_keys()
        return {name for name in names if canonical_role_name(name) not in available}

    async def resolve_roles(self, names: Iterable[str], conn=None) -> List[Role]:
        """
        Load the roles for the given names.

        Only names that exist are returned; callers compare the result size
        with the number of distinct names they asked for.
        """
        keys = {canonical_role_name(name) for name in names}
        keys.discard("")
        return await self.roles.find_by_keys(keys, conn=conn)

    async def count_holders(self, role_id: int) -> int:
        role = await self.get_role(role_id)
        return await self.roles.count_holders(role.id)

    # -------------------------------------------------------------- mutations
    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        cleaned = " ".join((name or "").split())
        # The lookup key must carry the same length bounds as the display name
        key = canonical_role_name(cleaned)
        if not (2 <= len(cleaned) <= 50 and 2 <= len(key) <= 50):
            raise ValidationError.for_field("name", "Role name must be between 2 and 50 characters", name)
        return cleaned

    @staticmethod
    def _clean_description(description: Optional[str]) -> Optional[str]:
        if description is None:
            return None
        description = description.strip()
        if len(description) > 255:
            raise ValidationError.for_field("description", "Description must not exceed 255 characters", description)
        return description or None

    async def create_role(self, name: str, description: Optional[str] = None) -> Role:
        name = self._clean_name(name)
        key = canonical_role_name(name)
        if await self.roles.key_exists(key):
            raise ConflictError(f"Role already exists: {name}")
        try:
            role = await self.roles.create(name, key, self._clean_description(description))
        except IntegrityError as exc:
            raise ConflictError(f"Role already exists: {name}") from exc
        logger.info("Role created: id=%s name=%s", role.id, role.name)
        return role

    async def update_role(self, role_id: int, name: Optional[str] = None, description: Optional[str] = None) -> Role:
        try:
            async with in_transaction() as conn:
                role = await self.roles.get(role_id, conn=conn)
                if role is None:
                    raise NotFoundError(f"Role not found with ID: {role_id}")

                new_name = self._clean_name(name) if name is not None else role.name
                if new_name != role.name:
                    if role.is_protected:
                        raise ConflictError(f"Cannot rename default role: {role.name}")
                    new_key = canonical_role_name(new_name)
                    if await self.roles.key_exists(new_key, exclude_id=role.id, conn=conn):
                        raise ConflictError(f"Role name already exists: {new_name}")
                    role.name = new_name
                    role.name_key = new_key

                if description is not None:
                    role.description = self._clean_description(description)

                await self.roles.save(role, conn=conn)
        except IntegrityError as exc:
            raise ConflictError(f"Role name already exists: {name}") from exc
        logger.info("Role updated: id=%s name=%s", role.id, role.name)
        return role

    async def delete_role(self, role_id: int) -> None:
        """
        Delete a role.

        Raises:
            NotFoundError: unknown id
            ConflictError: the role is held by at least one user, or is a
                protected default role
        """
        async with in_transaction() as conn:
            role = await self.roles.get(role_id, conn=conn)
            if role is None:
                raise NotFoundError(f"Role not found with ID: {role_id}")

            holders = await self.roles.count_holders(role.id, conn=conn)
            if holders:
                raise ConflictError(
                    f"Cannot delete role '{role.name}' as it is assigned to {holders} user(s)"
                )
            if role.is_protected:
                raise ConflictError(f"Cannot delete default role: {role.name}")

            await self.roles.delete(role, conn=conn)
        logger.info("Role deleted: id=%s name=%s", role_id, role.name)

    async def seed_default_roles(self) -> List[str]:
        """Create any missing default role. Safe to run on every startup."""
        created = []
        for name, description in DEFAULT_ROLES.items():
            key = canonical_role_name(name)
            if await self.roles.key_exists(key):
                logger.debug("Role already exists: %s", name)
                continue
            try:
                await self.roles.create(name, key, description)
            except IntegrityError:
                # Another process seeded it between the check and the insert
                continue
            created.append(name)
            logger.debug("Created role: %s", name)
        logger.info("Default roles initialization completed (created=%s)", created)
        return created
