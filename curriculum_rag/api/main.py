"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers, observability middleware
and exception handlers, and configures uvicorn server.

Dependencies: fastapi, curriculum_rag.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from curriculum_rag.api.deps.dependencies import get_service_cache
from curriculum_rag.api.errors import register_exception_handlers
from curriculum_rag.api.routers import (
    documents_router,
    evaluations_router,
    health_router,
    rag_router,
)
from curriculum_rag.configs import get_settings
from curriculum_rag.observability.logger import configure_logging
from curriculum_rag.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    configure_logging(get_settings().log_level)
    logger.info("Application startup: logging configured")

    yield

    get_service_cache().clear()
    logger.info("Application shutdown: service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="Curriculum RAG API",
        description="Retrieval-augmented knowledge core for curriculum Q&A",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    register_exception_handlers(app)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(documents_router, prefix="/api/v1")
    app.include_router(rag_router, prefix="/api/v1")
    app.include_router(evaluations_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "curriculum_rag.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
