# user_registration/stores/user_store.py
"""
User persistence.
Users are always returned with their roles prefetched so read models can be
built without further queries.
"""
from typing import Iterable, List, Optional

from tortoise.backends.base.client import BaseDBAsyncClient

from user_registration.models.role import Role
from user_registration.models.user import User
from user_registration.stores.base import BaseStore


class UserStore(BaseStore):
    model = User

    async def get(self, user_id: int, conn: Optional[BaseDBAsyncClient] = None) -> Optional[User]:
        return await self._query(conn, id=user_id).prefetch_related("roles").first()

    async def get_by_email(self, email: str, conn: Optional[BaseDBAsyncClient] = None) -> Optional[User]:
        """Exact match on the stored (already normalized) email."""
        return await self._query(conn, email=email).prefetch_related("roles").first()

    async def email_exists(self, email: str, conn: Optional[BaseDBAsyncClient] = None) -> bool:
        return await self._query(conn, email=email).exists()

    async def phone_exists(
        self, phone_number: str, exclude_id: Optional[int] = None, conn: Optional[BaseDBAsyncClient] = None
    ) -> bool:
        qs = self._query(conn, phone_number=phone_number)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return await qs.exists()

    async def list_all(self) -> List[User]:
        return await self._query().order_by("id").prefetch_related("roles")

    async def list_by_country(self, country: str) -> List[User]:
        return await self._query(country=country).order_by("id").prefetch_related("roles")

    async def any_with_role(self, name_key: str) -> bool:
        return await self._query(roles__name_key=name_key).exists()

    async def create(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        phone_number: Optional[str],
        country: Optional[str],
        roles: Iterable[Role],
        conn: Optional[BaseDBAsyncClient] = None,
    ) -> User:
        """
        Insert a user row and attach its roles.

        Raises:
            tortoise.exceptions.IntegrityError: email or phone already taken
        """
        user = await User.create(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=password_hash,
            phone_number=phone_number,
            country=country,
            using_db=conn,
        )
        roles = list(roles)
        if roles:
            await user.roles.add(*roles, using_db=conn)
        await user.fetch_related("roles", using_db=conn)
        return user

    async def save(self, user: User, conn: Optional[BaseDBAsyncClient] = None) -> User:
        await user.save(using_db=conn)
        return user

    async def delete(self, user: User, conn: Optional[BaseDBAsyncClient] = None) -> None:
        await user.roles.clear(using_db=conn)
        await user.delete(using_db=conn)
