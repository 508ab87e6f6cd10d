"""
Hybrid retriever.

Ranks the chunks an identity may read by a fusion of embedding cosine
similarity and lexical keyword overlap. Visibility filtering happens in
the store query, before scoring and truncation, so private chunks can
never displace or reveal themselves through the ranked list.

Dependencies: numpy, langchain_core, curriculum_rag.boundary.db
System role: Retrieval stage of the query pipeline
"""

import logging
from typing import Sequence

import numpy as np
from langchain_core.embeddings import Embeddings
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.CRUD.chunk_crud import chunk_crud
from curriculum_rag.core.exceptions import ProviderError, ValidationError
from curriculum_rag.core.text_utils import lexical_overlap
from curriculum_rag.models.retrieval import RetrievedChunk

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        dot(a, b) / (|a| |b|), or 0.0 when either vector has zero norm

    Raises:
        ValidationError: If the vectors differ in dimension
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValidationError(
            "Embedding dimension mismatch",
            details={"left": int(va.size), "right": int(vb.size)},
        )
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


class HybridRetriever:
    """
    Vector + lexical retriever over the chunk store.

    Fused score = vector_weight * cosine + lexical_weight * lexical.
    Results sort by fused score descending with chunk id ascending as the
    tie-break, so a fixed store and query always produce the same list.
    """

    def __init__(
        self,
        embeddings: Embeddings,
        vector_weight: float = 0.7,
        lexical_weight: float = 0.3,
        max_results: int = 50,
        default_limit: int = 5,
    ) -> None:
        """
        Args:
            embeddings: Embedding provider used for the query vector
            vector_weight: Weight of cosine similarity
            lexical_weight: Weight of lexical overlap
            max_results: Hard cap on returned chunks
            default_limit: Limit used when the caller gives none
        """
        self.embeddings = embeddings
        self.vector_weight = vector_weight
        self.lexical_weight = lexical_weight
        self.max_results = max_results
        self.default_limit = default_limit

    def effective_limit(self, limit: int | None) -> int:
        """Clamp a requested limit into [1, max_results]."""
        requested = limit if limit is not None else self.default_limit
        return max(1, min(requested, self.max_results))

    async def embed_query(self, query: str) -> list[float]:
        """Embed query text, wrapping provider failures."""
        try:
            return await self.embeddings.aembed_query(query)
        except Exception as e:
            logger.error(f"{__name__}:embed_query - {type(e).__name__}: {e}")
            raise ProviderError(
                f"Embedding provider failed: {e}",
                provider="embedding",
            ) from e

    async def retrieve(
        self,
        session: AsyncSession,
        query: str,
        identity: str,
        limit: int | None = None,
    ) -> list[RetrievedChunk]:
        """
        Rank the chunks visible to identity against query.

        Args:
            session: Async database session
            query: Query text
            identity: Requesting identity
            limit: Maximum results (defaults to default_limit, capped at max_results)

        Returns:
            Ranked chunks, best first

        Raises:
            ValidationError: If the query is empty
            ProviderError: If the embedding provider fails
        """
        if not query or not query.strip():
            raise ValidationError("Query must not be empty", field="query")
        top_k = self.effective_limit(limit)

        query_vector = await self.embed_query(query)
        rows = await chunk_crud.get_eligible(session, identity)

        scored: list[RetrievedChunk] = []
        for chunk, document in rows:
            similarity = cosine_similarity(query_vector, chunk.embedding)
            lexical = lexical_overlap(query, chunk.content)
            scored.append(
                RetrievedChunk(
                    chunk_id=chunk.id,
                    document_id=document.id,
                    content=chunk.content,
                    similarity=similarity,
                    lexical_score=lexical,
                    score=self.vector_weight * similarity + self.lexical_weight * lexical,
                    heading=chunk.heading,
                    is_code=chunk.is_code,
                    document_title=document.title,
                    visibility=document.visibility,
                    owner_id=document.owner_id,
                )
            )

        scored.sort(key=lambda item: (-item.score, str(item.chunk_id)))
        results = scored[:top_k]
        logger.info(
            f"{__name__}:retrieve - {len(rows)} eligible, returning {len(results)} (limit={top_k})"
        )
        return results
