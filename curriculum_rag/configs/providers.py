"""
Model provider configuration settings.

Model identifiers for synthesis, evaluation and embeddings, plus the
retry budgets callers apply around provider calls.

Dependencies: pydantic_settings
System role: LLM and embedding provider configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from curriculum_rag.configs.base import BaseSettings


class ProviderSettings(BaseSettings):
    """LLM and embedding provider configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROVIDER_",
        case_sensitive=False,
        extra="ignore",
    )

    synthesis_model: str = Field(default="gemini-2.5-flash", description="Chat model for answers")
    evaluation_model: str = Field(default="gemini-2.5-flash-lite", description="Chat model for scoring")
    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Embedding model identifier",
    )
    temperature: float = Field(default=0.0, description="Sampling temperature for chat models")

    synthesis_max_retries: int = Field(
        default=0,
        description="Retries around synthesis calls (0 disables retrying)",
        ge=0,
    )
    evaluation_max_retries: int = Field(
        default=3,
        description="Retries around scoring calls",
        ge=0,
    )
