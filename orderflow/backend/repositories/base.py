"""
Shared data access for the order flow tables.

Every table is keyed by a string UUID, so lookups go through the identity
map via session.get. Writes flush but never commit; the request's session
dependency owns the transaction.
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from orderflow.backend.core.exceptions import NotFoundError
from orderflow.backend.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Subclasses only name their model:

        class ShopRepository(BaseRepository[Shop]):
            model = Shop
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _one_or_none(self, stmt: Select) -> ModelType | None:
        return (await self.session.execute(stmt.limit(1))).scalar_one_or_none()

    async def _all(self, stmt: Select) -> list[ModelType]:
        return list((await self.session.execute(stmt)).scalars().all())

    async def _persist(self, instance: ModelType) -> ModelType:
        # Refresh so server-side defaults (timestamps) are loaded.
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get_by_id_or_none(self, id: str | UUID) -> ModelType | None:
        return await self.session.get(self.model, str(id))

    async def get_by_id(self, id: str | UUID) -> ModelType:
        """Raises NotFoundError naming the model, e.g. "OrderFlow not found"."""
        instance = await self.get_by_id_or_none(id)
        if instance is None:
            raise NotFoundError(f"{self.model.__name__} not found", details={"id": str(id)})
        return instance

    async def create(self, **values: Any) -> ModelType:
        instance = self.model(**values)
        self.session.add(instance)
        return await self._persist(instance)

    async def update(self, id: str | UUID, **values: Any) -> ModelType:
        """Apply column values; keys that are not attributes of the model are skipped."""
        instance = await self.get_by_id(id)
        for column, value in values.items():
            if hasattr(instance, column):
                setattr(instance, column, value)
        return await self._persist(instance)

    async def delete(self, id: str | UUID) -> None:
        await self.session.delete(await self.get_by_id(id))
        await self.session.flush()
