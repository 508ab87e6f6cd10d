"""
Query log and citation CRUD operations.

Dependencies: sqlalchemy, curriculum_rag.boundary.db.models.query_model
System role: Query audit and provenance persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.models.query_model import CitationModel, QueryLogModel
from curriculum_rag.boundary.db.CRUD.base_crud import BaseCRUD


class QueryLogCRUD(BaseCRUD[QueryLogModel]):
    """CRUD operations for QueryLogModel."""

    def __init__(self) -> None:
        """Initialize QueryLogCRUD with QueryLogModel."""
        super().__init__(QueryLogModel)


class CitationCRUD(BaseCRUD[CitationModel]):
    """
    CRUD operations for CitationModel.

    Citations are append-only: no update helpers are exposed.
    """

    def __init__(self) -> None:
        """Initialize CitationCRUD with CitationModel."""
        super().__init__(CitationModel)

    async def add_many(self, session: AsyncSession, rows: list[dict]) -> list[CitationModel]:
        """
        Insert several citation rows in one flush.

        Args:
            session: Async database session
            rows: Field dicts (query_id, chunk_id, document_id, rank, relevance_score)

        Returns:
            Inserted CitationModel instances
        """
        instances = [CitationModel(**row) for row in rows]
        session.add_all(instances)
        await session.flush()
        return instances

    async def get_by_query_id(
        self,
        session: AsyncSession,
        query_id: UUID,
    ) -> Sequence[CitationModel]:
        """
        Retrieve a query's citations ordered by rank.

        Args:
            session: Async database session
            query_id: Query log UUID

        Returns:
            Citation rows in rank order
        """
        stmt = (
            select(CitationModel)
            .where(CitationModel.query_id == query_id)
            .order_by(CitationModel.rank)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


query_log_crud = QueryLogCRUD()
citation_crud = CitationCRUD()
