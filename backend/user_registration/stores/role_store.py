# user_registration/stores/role_store.py
"""
Role persistence.
Roles are looked up by their canonical ``name_key``; callers normalize names
before reaching this layer.
"""
from typing import Iterable, List, Optional

from tortoise.backends.base.client import BaseDBAsyncClient

from user_registration.models.role import Role
from user_registration.models.user import User
from user_registration.stores.base import BaseStore


class RoleStore(BaseStore):
    model = Role

    async def list_all(self) -> List[Role]:
        return await self._query().order_by("id")

    async def get(self, role_id: int, conn: Optional[BaseDBAsyncClient] = None) -> Optional[Role]:
        return await self._query(conn, id=role_id).first()

    async def get_by_key(self, name_key: str, conn: Optional[BaseDBAsyncClient] = None) -> Optional[Role]:
        return await self._query(conn, name_key=name_key).first()

    async def find_by_keys(self, name_keys: Iterable[str], conn: Optional[BaseDBAsyncClient] = None) -> List[Role]:
        keys = list(name_keys)
        if not keys:
            return []
        return await self._query(conn, name_key__in=keys).order_by("id")

    async def key_exists(
        self, name_key: str, exclude_id: Optional[int] = None, conn: Optional[BaseDBAsyncClient] = None
    ) -> bool:
        qs = self._query(conn, name_key=name_key)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return await qs.exists()

    async def all_keys(self, conn: Optional[BaseDBAsyncClient] = None) -> set[str]:
        return set(await self._query(conn).values_list("name_key", flat=True))

    async def create(
        self,
        name: str,
        name_key: str,
        description: Optional[str] = None,
        conn: Optional[BaseDBAsyncClient] = None,
    ) -> Role:
        return await Role.create(name=name, name_key=name_key, description=description, using_db=conn)

    async def save(self, role: Role, conn: Optional[BaseDBAsyncClient] = None) -> Role:
        await role.save(using_db=conn)
        return role

    async def delete(self, role: Role, conn: Optional[BaseDBAsyncClient] = None) -> None:
        await role.delete(using_db=conn)

    async def count_holders(self, role_id: int, conn: Optional[BaseDBAsyncClient] = None) -> int:
        """Number of users currently holding the role (derived back-reference)."""
        qs = User.filter(roles__id=role_id)
        if conn is not None:
            qs = qs.using_db(conn)
        return await qs.count()
