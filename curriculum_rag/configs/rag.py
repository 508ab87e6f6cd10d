"""
Retrieval configuration settings.

Chunking window, hybrid ranking weights, result caps and the context
budget used when assembling memory-aware prompts.

Dependencies: pydantic, pydantic_settings
System role: Retrieval pipeline configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from curriculum_rag.configs.base import BaseSettings


class RAGSettings(BaseSettings):
    """Chunking, retrieval and context assembly configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAG_",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(default=1000, description="Chunk window size in characters", gt=0)
    chunk_overlap: int = Field(default=200, description="Overlap between consecutive chunks", ge=0)

    default_limit: int = Field(default=5, description="Chunks returned when no limit is requested", ge=1)
    max_results: int = Field(default=50, description="Hard cap on retrieval results", ge=1)
    vector_weight: float = Field(default=0.7, description="Weight of cosine similarity in fused score")
    lexical_weight: float = Field(default=0.3, description="Weight of keyword overlap in fused score")

    context_budget_chars: int = Field(
        default=8000,
        description="Maximum characters of assembled context passed to synthesis",
        gt=0,
    )
    memory_turn_limit: int = Field(default=20, description="Recent turns scanned per conversation", ge=1)
    memory_results: int = Field(default=3, description="Conversation turns kept as context", ge=0)

    embed_rate_per_second: float = Field(
        default=10.0,
        description="Token bucket refill rate for bulk embedding calls",
        gt=0,
    )
    embed_burst: int = Field(default=1, description="Token bucket capacity for embedding calls", ge=1)

    @model_validator(mode="after")
    def _check_window(self) -> "RAGSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self
