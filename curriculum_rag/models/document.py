"""
Document domain models and schemas.

Request/response schemas for document ingestion, update and deletion.

Dependencies: pydantic
System role: Document API contracts
"""

import uuid

from pydantic import BaseModel, Field

from curriculum_rag.boundary.db.models.document_model import Visibility


class IngestDocumentRequest(BaseModel):
    """Request schema for ingesting a document."""

    title: str = Field(min_length=1, max_length=255, description="Document title")
    content: str = Field(description="Raw document text")
    visibility: Visibility = Field(default=Visibility.PRIVATE, description="Who may retrieve chunks")


class UpdateDocumentRequest(BaseModel):
    """Request schema for replacing a document's content."""

    content: str = Field(description="New raw document text")


class IngestDocumentResponse(BaseModel):
    """Response schema for ingestion."""

    document_id: uuid.UUID
    chunks_created: int


class UpdateDocumentResponse(BaseModel):
    """Response schema for a content update."""

    document_id: uuid.UUID
    chunks_created: int
    generation: int
