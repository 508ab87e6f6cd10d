"""
Chunk CRUD operations.

Writes chunk generations, garbage-collects superseded generations and
scans the live chunks an identity is allowed to see.

Dependencies: sqlalchemy, curriculum_rag.boundary.db.models
System role: Chunk store operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.models.chunk_model import ChunkModel
from curriculum_rag.boundary.db.models.document_model import DocumentModel, Visibility
from curriculum_rag.boundary.db.CRUD.base_crud import BaseCRUD


def visibility_predicate(identity: str):
    """
    SQL predicate selecting documents the identity may read.

    A document is readable when it is system-owned (owner NULL), owned by
    the identity, or marked public.
    """
    return or_(
        DocumentModel.owner_id.is_(None),
        DocumentModel.owner_id == identity,
        DocumentModel.visibility == Visibility.PUBLIC,
    )


class ChunkCRUD(BaseCRUD[ChunkModel]):
    """CRUD operations for ChunkModel."""

    def __init__(self) -> None:
        """Initialize ChunkCRUD with ChunkModel."""
        super().__init__(ChunkModel)

    async def add_generation(
        self,
        session: AsyncSession,
        document_id: UUID,
        generation: int,
        rows: list[dict],
    ) -> list[ChunkModel]:
        """
        Insert a full chunk generation for a document.

        Args:
            session: Async database session
            document_id: Parent document UUID
            generation: Generation number for every inserted row
            rows: Field dicts (chunk_index, content, heading, is_code,
                embedding, word_count)

        Returns:
            Inserted ChunkModel instances in index order
        """
        instances = [
            ChunkModel(document_id=document_id, generation=generation, **row)
            for row in rows
        ]
        session.add_all(instances)
        await session.flush()
        return instances

    async def delete_stale_generations(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> int:
        """
        Remove generations older than the document's live generation.

        The live generation is read from the document row inside the
        DELETE itself, so a cleanup that runs after a later re-chunk has
        already moved the pointer only removes what that re-chunk
        superseded. Generations above the pointer belong to re-chunks
        still in flight and are left alone.

        Args:
            session: Async database session
            document_id: Parent document UUID

        Returns:
            Number of rows deleted
        """
        live_generation = (
            select(DocumentModel.current_generation)
            .where(DocumentModel.id == document_id)
            .scalar_subquery()
        )
        stmt = delete(ChunkModel).where(
            ChunkModel.document_id == document_id,
            ChunkModel.generation < live_generation,
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def get_live_for_document(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> Sequence[ChunkModel]:
        """
        Retrieve the live generation of a document's chunks in order.

        Args:
            session: Async database session
            document_id: Parent document UUID

        Returns:
            Chunks of the current generation ordered by chunk_index
        """
        stmt = (
            select(ChunkModel)
            .join(DocumentModel, ChunkModel.document_id == DocumentModel.id)
            .where(
                ChunkModel.document_id == document_id,
                ChunkModel.generation == DocumentModel.current_generation,
            )
            .order_by(ChunkModel.chunk_index)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_eligible(
        self,
        session: AsyncSession,
        identity: str,
    ) -> Sequence[tuple[ChunkModel, DocumentModel]]:
        """
        Scan live chunks readable by an identity.

        Visibility is enforced in the query itself so ineligible chunks
        never reach ranking.

        Args:
            session: Async database session
            identity: Requesting identity

        Returns:
            (chunk, document) pairs of the current generation
        """
        stmt = (
            select(ChunkModel, DocumentModel)
            .join(
                DocumentModel,
                and_(
                    ChunkModel.document_id == DocumentModel.id,
                    ChunkModel.generation == DocumentModel.current_generation,
                ),
            )
            .where(visibility_predicate(identity))
        )
        result = await session.execute(stmt)
        return result.tuples().all()


chunk_crud = ChunkCRUD()
