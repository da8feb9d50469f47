"""Base repository."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar, cast
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Common CRUD operations on one model class.

    Repositories only flush; committing is the caller's business (the
    request-scoped session or an explicit ``session.commit()`` in a service).
    """

    model_class: type[T]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _base_query(self) -> Any:
        return select(cast(Any, self.model_class))

    @asynccontextmanager
    async def begin_nested(self) -> AsyncIterator[None]:
        """Begin a nested transaction scope for multi-step updates."""
        async with self.session.begin_nested():
            yield

    async def get_by_id(self, id: UUID) -> T | None:
        """Get entity by ID."""
        model = cast(Any, self.model_class)
        result = await self.session.execute(self._base_query().where(model.id == id))
        return result.scalar_one_or_none()

    async def create(self, entity: T) -> T:
        """Add, flush and refresh a new entity."""
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(self, entity: T) -> T:
        """Flush pending changes of an entity."""
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity: T) -> None:
        """Hard delete an entity."""
        await self.session.delete(entity)
        await self.session.flush()
