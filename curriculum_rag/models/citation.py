"""
Citation domain model.

Represents a persisted link between an answer and a grounding chunk.

Dependencies: pydantic
System role: Citation data structure
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Citation(BaseModel):
    """Citation record for source attribution."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    query_id: uuid.UUID
    chunk_id: uuid.UUID
    document_id: uuid.UUID
    rank: int = Field(ge=1, description="1-based position in the synthesis context")
    relevance_score: float
    created_at: datetime
