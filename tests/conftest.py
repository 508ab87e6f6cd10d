"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory async database, deterministic embedding and chat fakes,
seeded documents, and pipeline builders
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite, langchain_core
System role: Test infrastructure and fixture management
"""

import math
import re
import zlib

import pytest
from langchain_core.embeddings import Embeddings
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from curriculum_rag.application.services.document_service import DocumentService
from curriculum_rag.boundary.db.base import Base
from curriculum_rag.boundary.db import models  # noqa: F401
from curriculum_rag.core.chunker import Chunker
from curriculum_rag.core.memory_integrator import MemoryIntegrator
from curriculum_rag.core.pipeline import AnswerPipeline
from curriculum_rag.core.retriever import HybridRetriever
from curriculum_rag.core.synthesizer import Synthesizer

EMBEDDING_DIM = 64


class BagOfWordsEmbeddings(Embeddings):
    """Deterministic hashed bag-of-words embeddings.

    Texts sharing words get positive cosine similarity; texts with no
    shared words are orthogonal unless their hashes collide.
    """

    def __init__(self, dimension: int = EMBEDDING_DIM) -> None:
        self.dimension = dimension
        self.calls = 0

    def _embed(self, text: str) -> list[float]:
        vector = [0.0] * self.dimension
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            vector[zlib.crc32(token.encode()) % self.dimension] += 1.0
        norm = math.sqrt(sum(v * v for v in vector))
        return [v / norm for v in vector] if norm else vector

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls += 1
        return [self._embed(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        self.calls += 1
        return self._embed(text)

    async def aembed_documents(self, texts: list[str]) -> list[list[float]]:
        return self.embed_documents(texts)

    async def aembed_query(self, text: str) -> list[float]:
        return self.embed_query(text)


class FailingEmbeddings(Embeddings):
    """Embeddings provider that always fails."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        raise RuntimeError("embedding service unavailable")

    def embed_query(self, text: str) -> list[float]:
        raise RuntimeError("embedding service unavailable")

    async def aembed_documents(self, texts: list[str]) -> list[list[float]]:
        return self.embed_documents(texts)

    async def aembed_query(self, text: str) -> list[float]:
        return self.embed_query(text)


@pytest.fixture
async def engine():
    """In-memory SQLite async engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_async_db(session_factory):
    """
    Async session on the in-memory test database.

    Yields:
        AsyncSession: Test database session, rolled back afterwards
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def embeddings() -> BagOfWordsEmbeddings:
    """Deterministic embedding provider."""
    return BagOfWordsEmbeddings()


@pytest.fixture
def chunker() -> Chunker:
    """Chunker with the default window."""
    return Chunker(chunk_size=1000, chunk_overlap=200)


@pytest.fixture
def retriever(embeddings) -> HybridRetriever:
    """Hybrid retriever over the fake embeddings."""
    return HybridRetriever(embeddings)


@pytest.fixture
def pipeline_factory(retriever):
    """Build answer pipelines whose chat model replies with canned responses in order."""

    def build(responses: list[str], context_budget_chars: int = 8000) -> AnswerPipeline:
        chat_model = FakeListChatModel(responses=responses)
        integrator = MemoryIntegrator(retriever, context_budget_chars=context_budget_chars)
        synthesizer = Synthesizer(chat_model, model_name="gemini-2.5-flash")
        return AnswerPipeline(integrator, synthesizer)

    return build


@pytest.fixture
def failing_embeddings() -> FailingEmbeddings:
    """Embedding provider that raises on every call."""
    return FailingEmbeddings()


@pytest.fixture
def document_service(test_async_db, embeddings, chunker) -> DocumentService:
    """Document service on the test database with admin identity 'admin'."""
    return DocumentService(
        db=test_async_db,
        embeddings=embeddings,
        chunker=chunker,
        admin_user_ids=["admin"],
    )
