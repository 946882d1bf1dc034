# user_registration/stores/base.py
from typing import Optional, Type

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.models import Model
from tortoise.queryset import QuerySet


class BaseStore:
    """Base class for stores. Subclasses set ``model``."""

    model: Type[Model]

    def _query(self, conn: Optional[BaseDBAsyncClient] = None, **filters) -> QuerySet:
        qs = self.model.filter(**filters)
        if conn is not None:
            qs = qs.using_db(conn)
        return qs
