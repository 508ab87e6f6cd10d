"""
Document ORM model.

Represents curriculum content owned by a learner or by the system, with
its visibility and the pointer to the live chunk generation.

Dependencies: sqlalchemy, curriculum_rag.boundary.db.base
System role: Document persistence for ingestion and access control
"""

import enum

from sqlalchemy import Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from curriculum_rag.boundary.db.base import Base, UUIDMixin, TimestampMixin


class Visibility(str, enum.Enum):
    """
    Document visibility levels.

    PRIVATE: Only the owner may retrieve chunks
    PUBLIC: Any identity may retrieve chunks
    SYSTEM: Platform curriculum; always owned by nobody
    """

    PRIVATE = "private"
    PUBLIC = "public"
    SYSTEM = "system"


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Document ORM model.

    Chunks are versioned by generation. Readers only see chunks whose
    generation equals current_generation; a re-chunk writes generation
    N+1 and flips the pointer in the same transaction.

    Attributes:
        id: UUID primary key (auto-generated)
        owner_id: Owning identity, NULL for system content
        title: Display title (255 char limit)
        content: Raw document text
        visibility: PRIVATE / PUBLIC / SYSTEM
        current_generation: Generation number of the live chunk set
        chunk_count: Number of chunks in the live generation

    Relationships:
        chunks: All chunk rows across generations (cascade delete)
    """

    __tablename__ = "documents"

    owner_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
        doc="Owning identity; NULL marks system content",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    visibility: Mapped[Visibility] = mapped_column(
        Enum(Visibility, native_enum=False),
        nullable=False,
        default=Visibility.PRIVATE,
    )

    current_generation: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    chunk_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    chunks = relationship(
        "ChunkModel",
        back_populates="document",
        cascade="all, delete-orphan",
    )
