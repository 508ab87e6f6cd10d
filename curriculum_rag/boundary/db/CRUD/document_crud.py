"""
Document CRUD operations.

Provides Create, Read, Update, Delete operations for DocumentModel,
including the atomic generation pointer flip used by re-chunking.

Dependencies: sqlalchemy, curriculum_rag.boundary.db.models.document_model
System role: Document persistence operations
"""

from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.models.document_model import DocumentModel
from curriculum_rag.boundary.db.CRUD.base_crud import BaseCRUD


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Extends BaseCRUD with generation switching and
    ORM-cascaded deletion.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def switch_generation(
        self,
        session: AsyncSession,
        id: UUID,
        expected_generation: int,
        new_generation: int,
        chunk_count: int,
        content: str,
    ) -> bool:
        """
        Flip the live chunk generation pointer.

        The update is conditional on the pointer still holding
        expected_generation so two concurrent re-chunks cannot both win.

        Args:
            session: Async database session
            id: Document UUID
            expected_generation: Generation the caller read before re-chunking
            new_generation: Generation to make live
            chunk_count: Number of chunks in the new generation
            content: Document text the new generation was built from

        Returns:
            True if the pointer moved, False if another writer got there first
        """
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.id == id)
            .where(DocumentModel.current_generation == expected_generation)
            .values(
                current_generation=new_generation,
                chunk_count=chunk_count,
                content=content,
            )
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def delete_document(self, session: AsyncSession, document: DocumentModel) -> None:
        """
        Delete a document and, via ORM cascade, all of its chunks.

        Args:
            session: Async database session
            document: Loaded document instance
        """
        await session.delete(document)
        await session.flush()


document_crud = DocumentCRUD()
