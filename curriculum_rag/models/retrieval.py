"""
Retrieval models.

Ranked chunks produced by hybrid search and the search endpoint contracts.

Dependencies: pydantic
System role: Retrieval data structures
"""

import uuid

from pydantic import BaseModel, Field

from curriculum_rag.boundary.db.models.document_model import Visibility


class RetrievedChunk(BaseModel):
    """A chunk scored against a query."""

    chunk_id: uuid.UUID
    document_id: uuid.UUID
    content: str
    similarity: float = Field(description="Cosine similarity to the query embedding")
    lexical_score: float = Field(description="Fraction of query terms found in the chunk")
    score: float = Field(description="Fused ranking score")
    heading: str | None = None
    is_code: bool = False
    document_title: str
    visibility: Visibility
    owner_id: str | None = None


class SearchRequest(BaseModel):
    """Request schema for raw hybrid search."""

    query: str = Field(min_length=1, description="Search text")
    limit: int | None = Field(default=None, ge=1, description="Maximum results")


class SearchMetadata(BaseModel):
    """Search timing and relevance summary."""

    total_results: int
    latency_ms: float
    avg_relevance: float


class SearchResponse(BaseModel):
    """Response schema for raw hybrid search."""

    results: list[RetrievedChunk]
    metadata: SearchMetadata
