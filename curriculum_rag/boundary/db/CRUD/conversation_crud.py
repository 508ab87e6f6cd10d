"""
Conversation turn CRUD operations.

Dependencies: sqlalchemy, curriculum_rag.boundary.db.models.conversation_model
System role: Conversation memory persistence operations
"""

from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.models.conversation_model import (
    ConversationTurnModel,
    TurnRole,
)
from curriculum_rag.boundary.db.CRUD.base_crud import BaseCRUD


class ConversationCRUD(BaseCRUD[ConversationTurnModel]):
    """CRUD operations for ConversationTurnModel."""

    def __init__(self) -> None:
        """Initialize ConversationCRUD with ConversationTurnModel."""
        super().__init__(ConversationTurnModel)

    async def append_turn(
        self,
        session: AsyncSession,
        conversation_id: str,
        user_id: str,
        role: TurnRole,
        content: str,
    ) -> ConversationTurnModel:
        """
        Append a turn at the end of a conversation.

        Args:
            session: Async database session
            conversation_id: Conversation identifier
            user_id: Identity the conversation belongs to
            role: Speaker role
            content: Turn text

        Returns:
            Created ConversationTurnModel
        """
        stmt = select(func.coalesce(func.max(ConversationTurnModel.turn_index), -1)).where(
            ConversationTurnModel.conversation_id == conversation_id
        )
        last_index = (await session.execute(stmt)).scalar_one()
        return await self.create(
            session,
            conversation_id=conversation_id,
            user_id=user_id,
            turn_index=last_index + 1,
            role=role,
            content=content,
        )

    async def get_recent(
        self,
        session: AsyncSession,
        conversation_id: str,
        user_id: str,
        limit: int,
    ) -> Sequence[ConversationTurnModel]:
        """
        Retrieve the most recent turns of a conversation, newest first.

        Turns are scoped to the owning identity; another identity's
        conversation id yields nothing.

        Args:
            session: Async database session
            conversation_id: Conversation identifier
            user_id: Requesting identity
            limit: Maximum number of turns

        Returns:
            Turns ordered by turn_index descending
        """
        stmt = (
            select(ConversationTurnModel)
            .where(
                ConversationTurnModel.conversation_id == conversation_id,
                ConversationTurnModel.user_id == user_id,
            )
            .order_by(ConversationTurnModel.turn_index.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


conversation_crud = ConversationCRUD()
