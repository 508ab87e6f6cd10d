"""
User budget CRUD operations.

Dependencies: sqlalchemy, curriculum_rag.boundary.db.models.budget_model
System role: Cost governance persistence operations
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.models.budget_model import UserBudgetModel
from curriculum_rag.boundary.db.CRUD.base_crud import BaseCRUD


class BudgetCRUD(BaseCRUD[UserBudgetModel]):
    """CRUD operations for UserBudgetModel."""

    def __init__(self) -> None:
        """Initialize BudgetCRUD with UserBudgetModel."""
        super().__init__(UserBudgetModel)

    async def get_by_user(self, session: AsyncSession, user_id: str) -> UserBudgetModel | None:
        """Retrieve the budget row for an identity."""
        stmt = select(UserBudgetModel).where(UserBudgetModel.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(
        self,
        session: AsyncSession,
        user_id: str,
        monthly_budget: float,
    ) -> UserBudgetModel:
        """Retrieve the budget row for an identity, creating a default one."""
        budget = await self.get_by_user(session, user_id)
        if budget is None:
            budget = await self.create(
                session,
                user_id=user_id,
                monthly_budget=monthly_budget,
                current_spend=0.0,
            )
        return budget


budget_crud = BudgetCRUD()
