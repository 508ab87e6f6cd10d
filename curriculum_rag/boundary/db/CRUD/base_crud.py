"""
Shared CRUD base for the curriculum store.

Every table-specific CRUD singleton (documents, chunks, conversation
turns, query logs, evaluation runs, budgets) inherits insert, primary key
lookup and partial update from here and adds its own queries.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic CRUD bound to one ORM model.

    Methods flush but never commit; the calling service owns the
    transaction.

    Attributes:
        model: ORM model class the queries target
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **values) -> ModelT:
        """
        Insert one row and load its server-side defaults.

        Args:
            session: Async database session
            **values: Column values

        Returns:
            Persisted instance with id and timestamps populated
        """
        instance = self.model(**values)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        """Row with the given primary key, or None."""
        result = await session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update_by_id(self, session: AsyncSession, id: UUID, **values) -> ModelT | None:
        """
        Set columns on one row.

        Args:
            session: Async database session
            id: Primary key
            **values: Columns to overwrite

        Returns:
            Updated instance, or None when no row has that id
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values(**values)
            .returning(self.model)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
