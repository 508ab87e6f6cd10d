"""
Conversation turn ORM model.

Stores prior turns of a learner conversation for memory-aware answers.

Dependencies: sqlalchemy, curriculum_rag.boundary.db.base
System role: Conversation memory persistence
"""

import enum

from sqlalchemy import Enum, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from curriculum_rag.boundary.db.base import Base, UUIDMixin, TimestampMixin


class TurnRole(str, enum.Enum):
    """Speaker of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class ConversationTurnModel(Base, UUIDMixin, TimestampMixin):
    """
    Conversation turn ORM model.

    turn_index is a per-conversation sequence so ordering stays stable
    when timestamps collide.
    """

    __tablename__ = "conversation_turns"
    __table_args__ = (
        UniqueConstraint("conversation_id", "turn_index", name="uq_conversation_turn"),
    )

    conversation_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    turn_index: Mapped[int] = mapped_column(Integer, nullable=False)

    role: Mapped[TurnRole] = mapped_column(Enum(TurnRole, native_enum=False), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)
