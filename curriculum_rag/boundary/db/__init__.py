"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management

Dependencies: sqlalchemy, curriculum_rag.configs
System role: Database adapter providing persistent storage for documents,
chunks, conversations, citations and evaluations.
"""

from curriculum_rag.boundary.db.base import Base, TimestampMixin, UUIDMixin
from curriculum_rag.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from curriculum_rag.boundary.db import models  # noqa: F401  (registers tables)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
]
