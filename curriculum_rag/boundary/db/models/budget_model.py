"""
User budget ORM model.

Tracks spend per identity over a rolling budget period.

Dependencies: sqlalchemy, curriculum_rag.boundary.db.base
System role: Cost governance persistence
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from curriculum_rag.boundary.db.base import Base, UUIDMixin, TimestampMixin, utcnow


class UserBudgetModel(Base, UUIDMixin, TimestampMixin):
    """Monthly spend allowance for one identity."""

    __tablename__ = "user_budgets"

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    monthly_budget: Mapped[float] = mapped_column(Float, nullable=False, default=10.0)
    current_spend: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    period_start: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    budget_exceeded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
