"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from curriculum_rag.configs.base import BaseSettings
from curriculum_rag.configs.database import DatabaseSettings
from curriculum_rag.configs.evaluation import EvaluationSettings
from curriculum_rag.configs.governance import GovernanceSettings
from curriculum_rag.configs.providers import ProviderSettings
from curriculum_rag.configs.rag import RAGSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = DatabaseSettings()
    rag: RAGSettings = RAGSettings()
    providers: ProviderSettings = ProviderSettings()
    evaluation: EvaluationSettings = EvaluationSettings()
    governance: GovernanceSettings = GovernanceSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from curriculum_rag.configs import get_settings
        settings = get_settings()
    """
    return Settings()
