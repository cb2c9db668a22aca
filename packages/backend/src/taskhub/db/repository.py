"""Generic persistence access for one mapped model.

Learn: Repositories stay thin and persistence-focused:
- "not found" is an absent result (None), never an exception — the
  services decide which error that becomes
- they flush but never commit; the service owning the use case commits
- no business rules, no ownership checks

Concurrency note: services compose these calls as read → decide → write.
Nothing here locks rows, so two requests racing on the same record are not
serialized. A version column or SELECT ... FOR UPDATE would be the place to
add that if it is ever needed.
"""

import uuid
from typing import Any, Generic, Mapping, Optional, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """CRUD access to a single table through an AsyncSession."""

    def __init__(self, db: AsyncSession, model: type[ModelT]):
        self.db = db
        self.model = model

    async def get(self, record_id: uuid.UUID) -> Optional[ModelT]:
        return await self.db.get(self.model, record_id)

    async def find_by(self, field: str, value: Any) -> Optional[ModelT]:
        column = getattr(self.model, field)
        result = await self.db.execute(select(self.model).where(column == value))
        return result.scalars().first()

    async def create(self, data: Mapping[str, Any]) -> ModelT:
        record = self.model(**data)
        self.db.add(record)
        await self.db.flush()  # assigns defaults (id, created_at)
        return record

    async def update(
        self, record_id: uuid.UUID, patch: Mapping[str, Any]
    ) -> Optional[ModelT]:
        """Apply ``patch`` to the record. Keys absent from the patch keep their value."""
        record = await self.get(record_id)
        if record is None:
            return None
        for field, value in patch.items():
            setattr(record, field, value)
        await self.db.flush()
        return record

    async def delete(self, record_id: uuid.UUID) -> None:
        record = await self.get(record_id)
        if record is not None:
            await self.db.delete(record)
            await self.db.flush()

    async def list_by_owner(
        self, owner_id: uuid.UUID, field: str = "owner_id"
    ) -> Sequence[ModelT]:
        """Records whose ``field`` equals ``owner_id`` — the filter is part of the query."""
        column = getattr(self.model, field)
        query = (
            select(self.model)
            .where(column == owner_id)
            .order_by(self.model.created_at.desc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_all(self) -> Sequence[ModelT]:
        query = select(self.model).order_by(self.model.created_at.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())
