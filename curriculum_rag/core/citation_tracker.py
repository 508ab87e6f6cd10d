"""
Citation tracking.

Persists the provenance of an answer: one append-only row per cited
chunk, ranked in the order the chunks were given to the synthesizer.

Dependencies: sqlalchemy, curriculum_rag.boundary.db
System role: Provenance stage of the query pipeline
"""

import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.CRUD.query_crud import citation_crud
from curriculum_rag.core.exceptions import ValidationError
from curriculum_rag.models.citation import Citation
from curriculum_rag.models.retrieval import RetrievedChunk

logger = logging.getLogger(__name__)


class CitationTracker:
    """Records and reads citations for answered queries."""

    async def track(
        self,
        session: AsyncSession,
        query_id: UUID,
        synthesized: list[RetrievedChunk],
        cited: Iterable[UUID] | None = None,
    ) -> list[Citation]:
        """
        Persist citations for a query.

        Args:
            session: Async database session
            query_id: Query log id the citations belong to
            synthesized: Chunks passed to the synthesizer, in context order
            cited: Optional subset of chunk ids to record

        Returns:
            Citation records ordered by rank

        Raises:
            ValidationError: If cited names a chunk outside the synthesis context
        """
        ranks = {chunk.chunk_id: rank for rank, chunk in enumerate(synthesized, start=1)}

        if cited is None:
            selected = synthesized
        else:
            wanted = set(cited)
            unknown = wanted - ranks.keys()
            if unknown:
                raise ValidationError(
                    "Citation references a chunk that was not in the synthesis context",
                    field="cited",
                    details={"chunk_ids": sorted(str(chunk_id) for chunk_id in unknown)},
                )
            selected = [chunk for chunk in synthesized if chunk.chunk_id in wanted]

        rows = await citation_crud.add_many(
            session,
            [
                {
                    "query_id": query_id,
                    "chunk_id": chunk.chunk_id,
                    "document_id": chunk.document_id,
                    "rank": ranks[chunk.chunk_id],
                    "relevance_score": chunk.score,
                }
                for chunk in selected
            ],
        )
        logger.info(f"{__name__}:track - {len(rows)} citations for query {query_id}")
        return [Citation.model_validate(row) for row in rows]

    async def for_query(self, session: AsyncSession, query_id: UUID) -> list[Citation]:
        """Citations of a query ordered by rank."""
        rows = await citation_crud.get_by_query_id(session, query_id)
        return [Citation.model_validate(row) for row in rows]
