"""
Query log and citation ORM models.

Every answered query is logged; citations link the query to the chunks
that grounded its answer. Citations are append-only audit rows and
deliberately carry no foreign key to chunks, which are garbage-collected
on re-chunk.

Dependencies: sqlalchemy, curriculum_rag.boundary.db.base
System role: Query audit and provenance persistence
"""

from uuid import UUID

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from curriculum_rag.boundary.db.base import Base, UUIDMixin, TimestampMixin


class QueryLogModel(Base, UUIDMixin, TimestampMixin):
    """Answered query with usage accounting."""

    __tablename__ = "rag_queries"

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    conversation_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    query: Mapped[str] = mapped_column(Text, nullable=False)
    response: Mapped[str | None] = mapped_column(Text, nullable=True)

    chunks_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    avg_relevance: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    latency_ms: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    input_tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    output_tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    citations = relationship(
        "CitationModel",
        back_populates="query_log",
        cascade="all, delete-orphan",
        order_by="CitationModel.rank",
    )


class CitationModel(Base, UUIDMixin, TimestampMixin):
    """Provenance link between a query's answer and one grounding chunk."""

    __tablename__ = "rag_citations"

    query_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("rag_queries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    document_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    relevance_score: Mapped[float] = mapped_column(Float, nullable=False)

    query_log = relationship("QueryLogModel", back_populates="citations")
