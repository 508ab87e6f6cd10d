"""
Query models and schemas.

Request/response schemas for memory-aware question answering.

Dependencies: pydantic
System role: Query API contracts
"""

import uuid

from pydantic import BaseModel, Field, field_validator

from curriculum_rag.models.citation import Citation

MAX_QUERY_CHARS = 4000


class QueryRequest(BaseModel):
    """Request schema for a learner question."""

    query: str = Field(min_length=1, max_length=MAX_QUERY_CHARS, description="Learner question")
    conversation_id: str | None = Field(
        default=None,
        description="UUID of the conversation to draw memory from",
    )
    limit: int | None = Field(default=None, ge=1, description="Maximum chunks retrieved")

    @field_validator("query")
    @classmethod
    def strip_query(cls, value: str) -> str:
        """Drop null bytes and surrounding whitespace; reject what is left empty."""
        cleaned = value.replace("\x00", "").strip()
        if not cleaned:
            raise ValueError("Query cannot be empty")
        return cleaned

    @field_validator("conversation_id")
    @classmethod
    def canonical_conversation_id(cls, value: str | None) -> str | None:
        """Require a UUID and store it in canonical lower-case form."""
        if value is None:
            return None
        try:
            return str(uuid.UUID(value))
        except ValueError as e:
            raise ValueError("conversation_id must be a UUID") from e


class TokenUsage(BaseModel):
    """Token counts for one synthesis call."""

    input_tokens: int
    output_tokens: int
    total_tokens: int


class SourceDocument(BaseModel):
    """Numbered sources that came from one document."""

    document_id: uuid.UUID
    document_title: str
    source_numbers: list[int]


class QueryMetadata(BaseModel):
    """Accounting attached to an answer."""

    sources_used: int
    avg_relevance: float
    latency_ms: float
    cost: float
    token_usage: TokenUsage
    confidence: float = Field(default=0.5, ge=0.0, le=1.0, description="Model's self-rated support")
    contradictions: list[str] = Field(default_factory=list)
    source_documents: list[SourceDocument] = Field(default_factory=list)


class QueryResponse(BaseModel):
    """Response schema for a grounded answer."""

    answer: str
    sources: list[Citation]
    has_memory_context: bool
    conversation_id: str | None = None
    query_id: uuid.UUID
    metadata: QueryMetadata
