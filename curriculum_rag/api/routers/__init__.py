"""
API routers.

Exports all routers for registration with the FastAPI application.
"""

from curriculum_rag.api.routers.documents import router as documents_router
from curriculum_rag.api.routers.evaluations import router as evaluations_router
from curriculum_rag.api.routers.health import router as health_router
from curriculum_rag.api.routers.rag import router as rag_router

__all__ = [
    "documents_router",
    "evaluations_router",
    "health_router",
    "rag_router",
]
