"""
Chunk ORM model.

Persists retrieval units with their embeddings, tagged with the
generation they were produced in.

Dependencies: sqlalchemy, curriculum_rag.boundary.db.base
System role: Chunk store rows
"""

from uuid import UUID

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from curriculum_rag.boundary.db.base import Base, UUIDMixin, TimestampMixin


class ChunkModel(Base, UUIDMixin, TimestampMixin):
    """
    Document chunk ORM model.

    Attributes:
        document_id: Parent document (ON DELETE CASCADE)
        generation: Chunk generation this row belongs to
        chunk_index: Ordinal position within the generation
        content: Text slice of the parent document
        heading: First markdown heading in the slice, if any
        is_code: True when the slice holds a fenced code block
        embedding: Embedding vector as a JSON float list
        word_count: Whitespace-delimited word count
    """

    __tablename__ = "document_chunks"
    __table_args__ = (
        UniqueConstraint("document_id", "generation", "chunk_index", name="uq_chunk_position"),
    )

    document_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    generation: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    heading: Mapped[str | None] = mapped_column(String(512), nullable=True)

    is_code: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    embedding: Mapped[list[float]] = mapped_column(JSON, nullable=False)

    word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    document = relationship("DocumentModel", back_populates="chunks")
