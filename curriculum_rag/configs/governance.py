"""
Governance configuration settings.

Per-identity request limits and monthly spend budgets consumed by the
query endpoints.

Dependencies: pydantic_settings
System role: Usage governance configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from curriculum_rag.configs.base import BaseSettings


class GovernanceSettings(BaseSettings):
    """Rate limit, budget and admin configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GOVERNANCE_",
        case_sensitive=False,
        extra="ignore",
    )

    query_rate_limit: int = Field(default=10, description="Queries allowed per window", ge=1)
    search_rate_limit: int = Field(default=20, description="Searches allowed per window", ge=1)
    rate_window_seconds: int = Field(default=60, description="Sliding window length in seconds", ge=1)

    default_monthly_budget: float = Field(default=10.0, description="Default monthly spend in USD")
    budget_period_days: int = Field(default=30, description="Days before spend resets", ge=1)

    admin_user_ids: list[str] = Field(
        default_factory=list,
        description="Identities allowed to manage system content",
    )
