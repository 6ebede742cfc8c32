"""Base repository mapping ORM rows to domain aggregates."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from saastral_api.models.orm.base import Base

T = TypeVar("T", bound=Base)
D = TypeVar("D")


class BaseRepository(Generic[T, D]):
    """Base repository with lookup and upsert operations.

    Subclasses set ``model`` and implement the two mapping hooks.
    Repositories flush but never commit; the session owner commits.
    """

    model: type[T]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.session = session

    def _to_domain(self, row: T) -> D:
        raise NotImplementedError

    def _to_row(self, entity: D) -> dict[str, Any]:
        raise NotImplementedError

    async def _get_row(self, id: UUID) -> T | None:
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def _first(self, statement: Any) -> D | None:
        result = await self.session.execute(statement)
        row = result.scalars().first()
        return self._to_domain(row) if row is not None else None

    async def _all(self, statement: Any) -> list[D]:
        result = await self.session.execute(statement)
        return [self._to_domain(row) for row in result.scalars().all()]

    async def find_by_id(self, id: UUID) -> D | None:
        """Get an aggregate by ID.

        Args:
            id: Record UUID

        Returns:
            Aggregate or None if not found
        """
        row = await self._get_row(id)
        return self._to_domain(row) if row is not None else None

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """Run a unit of work inside a SAVEPOINT.

        A failed flush rolls back only that unit; the surrounding
        transaction and session stay usable.
        """
        async with self.session.begin_nested():
            yield

    async def save(self, entity: D) -> D:
        """Insert or update the aggregate's row (idempotent upsert by id).

        Args:
            entity: Aggregate to persist

        Returns:
            The same aggregate
        """
        values = self._to_row(entity)
        row = await self._get_row(values["id"])
        if row is None:
            self.session.add(self.model(**values))
        else:
            for key, value in values.items():
                setattr(row, key, value)
        await self.session.flush()
        return entity

    async def delete(self, id: UUID) -> bool:
        """Delete a record by ID.

        Returns:
            True if deleted, False if not found
        """
        row = await self._get_row(id)
        if row is None:
            return False
        await self.session.delete(row)
        await self.session.flush()
        return True
