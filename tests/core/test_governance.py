"""
Tests for monthly budget checks and spend tracking.
"""

from datetime import timedelta

import pytest

from curriculum_rag.boundary.db.base import utcnow
from curriculum_rag.boundary.db.CRUD.budget_crud import budget_crud
from curriculum_rag.core.exceptions import BudgetExceededError
from curriculum_rag.core.governance import BudgetGuard


class TestBudgetGuard:
    @pytest.mark.asyncio
    async def test_creates_default_budget(self, test_async_db) -> None:
        budget = await BudgetGuard(default_monthly_budget=5.0).check(test_async_db, "learner")

        assert budget.monthly_budget == 5.0
        assert budget.current_spend == 0.0

    @pytest.mark.asyncio
    async def test_charge_then_exceed(self, test_async_db) -> None:
        guard = BudgetGuard(default_monthly_budget=1.0)
        await guard.charge(test_async_db, "learner", 0.6)
        await guard.check(test_async_db, "learner")
        budget = await guard.charge(test_async_db, "learner", 0.5)

        assert budget.budget_exceeded is True
        with pytest.raises(BudgetExceededError):
            await guard.check(test_async_db, "learner")

    @pytest.mark.asyncio
    async def test_period_reset(self, test_async_db) -> None:
        guard = BudgetGuard(default_monthly_budget=1.0, period_days=30)
        budget = await guard.charge(test_async_db, "learner", 2.0)
        budget.period_start = utcnow() - timedelta(days=31)
        await test_async_db.flush()

        budget = await guard.check(test_async_db, "learner")

        assert budget.current_spend == 0.0
        assert budget.budget_exceeded is False
        assert (await budget_crud.get_by_user(test_async_db, "learner")).current_spend == 0.0
