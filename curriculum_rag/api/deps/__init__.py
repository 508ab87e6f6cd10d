"""FastAPI dependency providers."""

from curriculum_rag.api.deps.dependencies import (
    ServiceCache,
    get_document_service,
    get_evaluation_service,
    get_identity,
    get_query_service,
    get_service_cache,
    get_session_factory,
)

__all__ = [
    "ServiceCache",
    "get_document_service",
    "get_evaluation_service",
    "get_identity",
    "get_query_service",
    "get_service_cache",
    "get_session_factory",
]
