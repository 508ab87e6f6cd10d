"""
Spend governance.

Checks an identity's monthly budget before a query runs and charges the
query's cost afterwards. Spend resets once the budget period elapses.

Dependencies: sqlalchemy, curriculum_rag.boundary.db
System role: Cost control for the query endpoints
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.base import utcnow
from curriculum_rag.boundary.db.CRUD.budget_crud import budget_crud
from curriculum_rag.boundary.db.models.budget_model import UserBudgetModel
from curriculum_rag.core.exceptions import BudgetExceededError

logger = logging.getLogger(__name__)


def _as_aware(value: datetime) -> datetime:
    # SQLite returns naive datetimes even for timezone-aware columns.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class BudgetGuard:
    """Per-identity monthly spend tracking."""

    def __init__(self, default_monthly_budget: float = 10.0, period_days: int = 30) -> None:
        self.default_monthly_budget = default_monthly_budget
        self.period = timedelta(days=period_days)

    async def _load(self, session: AsyncSession, identity: str) -> UserBudgetModel:
        budget = await budget_crud.get_or_create(session, identity, self.default_monthly_budget)
        now = utcnow()
        if now - _as_aware(budget.period_start) >= self.period:
            logger.info(f"{__name__}:_load - Resetting budget period for {identity}")
            budget.current_spend = 0.0
            budget.budget_exceeded = False
            budget.period_start = now
            await session.flush()
        return budget

    async def check(self, session: AsyncSession, identity: str) -> UserBudgetModel:
        """
        Ensure the identity still has budget left.

        Raises:
            BudgetExceededError: If spend has reached the monthly budget
        """
        budget = await self._load(session, identity)
        if budget.current_spend >= budget.monthly_budget:
            if not budget.budget_exceeded:
                budget.budget_exceeded = True
                await session.flush()
            raise BudgetExceededError()
        return budget

    async def charge(self, session: AsyncSession, identity: str, cost: float) -> UserBudgetModel:
        """Add cost to the identity's spend for the current period."""
        budget = await self._load(session, identity)
        budget.current_spend += cost
        budget.budget_exceeded = budget.current_spend >= budget.monthly_budget
        await session.flush()
        return budget
