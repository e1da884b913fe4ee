# services/store.py
"""Generic keyed collection over one ORM model.

Every entity type goes through the same four operations: insert,
point lookup, filtered scan and partial update. The session is owned
by the caller (one per request); the store only flushes, it never
commits.
"""
from __future__ import annotations

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.errors import NotFound
from familyhub.models import utcnow

ModelT = TypeVar("ModelT")


class ItemStore(Generic[ModelT]):
    def __init__(self, db: AsyncSession, model: Type[ModelT], *, label: Optional[str] = None):
        self.db = db
        self.model = model
        self.label = label or model.__name__

    def _has(self, column: str) -> bool:
        return column in self.model.__table__.columns

    async def insert(self, **values: Any) -> ModelT:
        """Add a record; the id comes from the table's counter, timestamps are stamped here."""
        now = utcnow()
        for column in ("created_at", "updated_at"):
            if self._has(column):
                values.setdefault(column, now)
        obj = self.model(**values)
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def get_by_id(self, item_id: int) -> Optional[ModelT]:
        return await self.db.get(self.model, item_id)

    async def require(self, item_id: int) -> ModelT:
        obj = await self.get_by_id(item_id)
        if obj is None:
            raise NotFound(f"{self.label} not found")
        return obj

    async def scan_where(self, *criteria: Any, order_by: Any = None) -> list[ModelT]:
        q = select(self.model).where(*criteria)
        q = q.order_by(order_by if order_by is not None else self.model.id)
        return list((await self.db.execute(q)).scalars().all())

    async def update(self, item_id: int, **fields: Any) -> ModelT:
        obj = await self.require(item_id)
        for key, value in fields.items():
            if not self._has(key):
                raise AttributeError(f"{self.label} has no field {key!r}")
            setattr(obj, key, value)
        if self._has("updated_at"):
            obj.updated_at = utcnow()
        await self.db.flush()
        return obj


__all__ = ["ItemStore"]
