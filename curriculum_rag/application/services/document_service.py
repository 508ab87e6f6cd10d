"""
Document service orchestrator.

Coordinates ingestion (chunk, embed, store), content updates through
versioned chunk generations, and deletion.

Dependencies: langchain_core, curriculum_rag.core, curriculum_rag.boundary.db
System role: Document management orchestration
"""

import logging
from uuid import UUID

from langchain_core.embeddings import Embeddings
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.CRUD.chunk_crud import chunk_crud
from curriculum_rag.boundary.db.CRUD.document_crud import document_crud
from curriculum_rag.boundary.db.models.document_model import DocumentModel, Visibility
from curriculum_rag.core.chunker import Chunker, TextChunk
from curriculum_rag.core.exceptions import (
    DocumentNotFoundError,
    PermissionDeniedError,
    ProviderError,
    ValidationError,
)
from curriculum_rag.core.rate_limiter import TokenBucketRateLimiter
from curriculum_rag.models.document import IngestDocumentResponse, UpdateDocumentResponse
from curriculum_rag.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

EMBED_BATCH_SIZE = 100


class DocumentService:
    """
    Document service orchestrator.

    Embeds before writing anything, so a provider failure leaves the
    store untouched. Every write operation commits on success and rolls
    back on failure.
    """

    def __init__(
        self,
        db: AsyncSession,
        embeddings: Embeddings,
        chunker: Chunker,
        rate_limiter: TokenBucketRateLimiter | None = None,
        admin_user_ids: list[str] | None = None,
    ) -> None:
        """
        Initialize document service.

        Args:
            db: AsyncSession for document and chunk persistence
            embeddings: Embedding provider
            chunker: Chunker configured with the window size
            rate_limiter: Pacing applied before each embedding call
            admin_user_ids: Identities allowed to manage system documents
        """
        self.db = db
        self.embeddings = embeddings
        self.chunker = chunker
        self.rate_limiter = rate_limiter
        self.admin_user_ids = set(admin_user_ids or [])

    async def _embed_chunks(self, chunks: list[TextChunk]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for offset in range(0, len(chunks), EMBED_BATCH_SIZE):
            texts = [chunk.content for chunk in chunks[offset : offset + EMBED_BATCH_SIZE]]
            if self.rate_limiter is not None:
                await self.rate_limiter.acquire()
            try:
                batch = await self.embeddings.aembed_documents(texts)
            except Exception as e:
                log_exception_with_context(
                    logger, "Embedding batch failed", e, batch_offset=offset, batch_size=len(texts)
                )
                raise ProviderError(f"Embedding provider failed: {e}", provider="embedding") from e
            if len(batch) != len(texts):
                raise ProviderError(
                    "Embedding provider returned the wrong number of vectors",
                    provider="embedding",
                    details={"expected": len(texts), "received": len(batch)},
                )
            vectors.extend(batch)
        return vectors

    async def _build_rows(self, content: str) -> list[dict]:
        chunks = self.chunker.split(content)
        vectors = await self._embed_chunks(chunks)
        return [
            {
                "chunk_index": chunk.index,
                "content": chunk.content,
                "heading": chunk.heading,
                "is_code": chunk.is_code,
                "word_count": chunk.word_count,
                "embedding": list(vector),
            }
            for chunk, vector in zip(chunks, vectors)
        ]

    def _authorize(self, document: DocumentModel, identity: str) -> None:
        if document.owner_id is None:
            allowed = identity in self.admin_user_ids
        else:
            allowed = document.owner_id == identity
        if not allowed:
            raise PermissionDeniedError(
                "Not allowed to modify this document",
                resource_id=str(document.id),
            )

    async def _get_owned(self, document_id: UUID, identity: str) -> DocumentModel:
        document = await document_crud.get_by_id(self.db, document_id)
        if document is None:
            raise DocumentNotFoundError(str(document_id))
        self._authorize(document, identity)
        return document

    async def ingest(
        self,
        title: str,
        content: str,
        visibility: Visibility,
        owner_id: str | None,
    ) -> IngestDocumentResponse:
        """
        Chunk, embed and store a new document.

        Steps:
        1. Resolve owner (system documents are owned by nobody)
        2. Chunk and embed the content
        3. Store the document and generation 1 of its chunks
        4. Commit

        Args:
            title: Document title
            content: Raw text
            visibility: PRIVATE / PUBLIC / SYSTEM
            owner_id: Requesting identity

        Returns:
            IngestDocumentResponse with document id and chunk count

        Raises:
            ValidationError: If the title is empty or a non-system document has no owner
            ProviderError: If embedding fails (nothing is stored)
        """
        if not title or not title.strip():
            raise ValidationError("Title must not be empty", field="title")
        owner = None if visibility == Visibility.SYSTEM else owner_id
        if visibility != Visibility.SYSTEM and not owner:
            raise ValidationError("Owner is required for non-system documents", field="owner_id")

        rows = await self._build_rows(content)
        try:
            document = await document_crud.create(
                self.db,
                owner_id=owner,
                title=title.strip(),
                content=content,
                visibility=visibility,
                current_generation=1,
                chunk_count=len(rows),
            )
            await chunk_crud.add_generation(self.db, document.id, 1, rows)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"{__name__}:ingest - document={document.id} visibility={visibility.value} "
            f"chunks={len(rows)}"
        )
        return IngestDocumentResponse(document_id=document.id, chunks_created=len(rows))

    async def update_content(
        self,
        document_id: UUID,
        content: str,
        identity: str,
    ) -> UpdateDocumentResponse:
        """
        Replace a document's content with a full re-chunk and re-embed.

        The new chunk set is written as generation N+1 and the document's
        generation pointer is flipped in the same transaction; generations
        older than the live one are removed afterwards.

        Args:
            document_id: Document UUID
            content: New raw text
            identity: Requesting identity

        Returns:
            UpdateDocumentResponse with the new chunk count and generation

        Raises:
            DocumentNotFoundError: If the document does not exist
            PermissionDeniedError: If the identity may not modify it
            ProviderError: If embedding fails (the live generation is untouched)
            ValidationError: If another update claimed the generation first
        """
        document = await self._get_owned(document_id, identity)
        current = document.current_generation
        new_generation = current + 1

        rows = await self._build_rows(content)
        try:
            await chunk_crud.add_generation(self.db, document.id, new_generation, rows)
            switched = await document_crud.switch_generation(
                self.db,
                document.id,
                expected_generation=current,
                new_generation=new_generation,
                chunk_count=len(rows),
                content=content,
            )
            if not switched:
                raise ValidationError(
                    "Document was updated concurrently, retry the update",
                    details={"document_id": str(document_id)},
                )
            await self.db.commit()
        except IntegrityError as e:
            # Another update already wrote chunks for new_generation.
            await self.db.rollback()
            logger.warning(
                f"{__name__}:update_content - generation {new_generation} of {document_id} "
                f"already taken"
            )
            raise ValidationError(
                "Document was updated concurrently, retry the update",
                details={"document_id": str(document_id)},
            ) from e
        except Exception:
            await self.db.rollback()
            raise

        removed = await chunk_crud.delete_stale_generations(self.db, document.id)
        await self.db.commit()

        logger.info(
            f"{__name__}:update_content - document={document_id} generation={new_generation} "
            f"chunks={len(rows)} removed={removed}"
        )
        return UpdateDocumentResponse(
            document_id=document.id,
            chunks_created=len(rows),
            generation=new_generation,
        )

    async def delete_document(self, document_id: UUID, identity: str) -> None:
        """
        Delete a document and all of its chunks.

        Raises:
            DocumentNotFoundError: If the document does not exist
            PermissionDeniedError: If the identity may not delete it
        """
        document = await self._get_owned(document_id, identity)
        await document_crud.delete_document(self.db, document)
        await self.db.commit()
        logger.info(f"{__name__}:delete_document - document={document_id}")
