"""
Evaluation harness configuration settings.

Dependencies: pydantic_settings
System role: Batch evaluation configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from curriculum_rag.configs.base import BaseSettings


class EvaluationSettings(BaseSettings):
    """Evaluation batching, limits and pass threshold."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    batch_size: int = Field(default=5, description="Questions evaluated concurrently", ge=1)
    max_questions: int = Field(default=200, description="Questions loaded per run", ge=1)
    pass_threshold: float = Field(default=0.7, description="Minimum overall score to pass", ge=0.0, le=1.0)
    question_timeout_seconds: float = Field(
        default=60.0,
        description="Upper bound on a single question's pipeline",
        gt=0,
    )
