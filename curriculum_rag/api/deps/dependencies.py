"""
Dependency injection container.

Factory functions for FastAPI dependencies. Providers, retrievers and
rate limiters are built once per process in ServiceCache; services are
built per request around the request's database session.

Dependencies: fastapi, curriculum_rag.configs, curriculum_rag.application, curriculum_rag.boundary
System role: DI container for service injection
"""

from fastapi import Depends, Header
from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from curriculum_rag.application.services import DocumentService, EvaluationService, QueryService
from curriculum_rag.boundary.db import get_async_db, get_async_session_factory
from curriculum_rag.configs import Settings, get_settings
from curriculum_rag.core.chunker import Chunker
from curriculum_rag.core.citation_tracker import CitationTracker
from curriculum_rag.core.exceptions import AuthError
from curriculum_rag.core.governance import BudgetGuard
from curriculum_rag.core.memory_integrator import MemoryIntegrator
from curriculum_rag.core.pipeline import AnswerPipeline
from curriculum_rag.core.rate_limiter import SlidingWindowRateLimiter, TokenBucketRateLimiter
from curriculum_rag.core.retriever import HybridRetriever
from curriculum_rag.core.synthesizer import Synthesizer
from curriculum_rag.evaluation.evaluators.harness import EvaluationHarness
from curriculum_rag.evaluation.evaluators.scorer import AnswerScorer


class ServiceCache:
    """Container for cached provider and pipeline instances."""

    def __init__(
        self,
        settings: Settings | None = None,
        embeddings: Embeddings | None = None,
        synthesis_model: BaseChatModel | None = None,
        evaluation_model: BaseChatModel | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._embeddings = embeddings
        self._synthesis_model = synthesis_model
        self._evaluation_model = evaluation_model
        self._retriever = None
        self._pipeline = None
        self._embed_limiter = None
        self._query_limiter = None
        self._search_limiter = None

    @property
    def embeddings(self) -> Embeddings:
        """Get cached embedding provider."""
        if self._embeddings is None:
            from curriculum_rag.boundary.providers import build_embeddings
            self._embeddings = build_embeddings(self.settings.providers)
        return self._embeddings

    @property
    def synthesis_model(self) -> BaseChatModel:
        """Get cached synthesis chat model."""
        if self._synthesis_model is None:
            from curriculum_rag.boundary.providers import build_chat_model
            providers = self.settings.providers
            self._synthesis_model = build_chat_model(providers.synthesis_model, providers)
        return self._synthesis_model

    @property
    def evaluation_model(self) -> BaseChatModel:
        """Get cached judge chat model."""
        if self._evaluation_model is None:
            from curriculum_rag.boundary.providers import build_chat_model
            providers = self.settings.providers
            self._evaluation_model = build_chat_model(providers.evaluation_model, providers)
        return self._evaluation_model

    @property
    def retriever(self) -> HybridRetriever:
        """Get cached hybrid retriever."""
        if self._retriever is None:
            rag = self.settings.rag
            self._retriever = HybridRetriever(
                self.embeddings,
                vector_weight=rag.vector_weight,
                lexical_weight=rag.lexical_weight,
                max_results=rag.max_results,
                default_limit=rag.default_limit,
            )
        return self._retriever

    @property
    def pipeline(self) -> AnswerPipeline:
        """Get cached answer pipeline."""
        if self._pipeline is None:
            rag = self.settings.rag
            providers = self.settings.providers
            integrator = MemoryIntegrator(
                self.retriever,
                context_budget_chars=rag.context_budget_chars,
                turn_limit=rag.memory_turn_limit,
                memory_results=rag.memory_results,
            )
            synthesizer = Synthesizer(
                self.synthesis_model,
                model_name=providers.synthesis_model,
                max_retries=providers.synthesis_max_retries,
            )
            self._pipeline = AnswerPipeline(integrator, synthesizer)
        return self._pipeline

    @property
    def embed_limiter(self) -> TokenBucketRateLimiter:
        """Get cached embedding call pacer."""
        if self._embed_limiter is None:
            rag = self.settings.rag
            self._embed_limiter = TokenBucketRateLimiter(rag.embed_rate_per_second, rag.embed_burst)
        return self._embed_limiter

    @property
    def query_limiter(self) -> SlidingWindowRateLimiter:
        """Get cached per-identity query limiter."""
        if self._query_limiter is None:
            governance = self.settings.governance
            self._query_limiter = SlidingWindowRateLimiter(
                governance.query_rate_limit, governance.rate_window_seconds
            )
        return self._query_limiter

    @property
    def search_limiter(self) -> SlidingWindowRateLimiter:
        """Get cached per-identity search limiter."""
        if self._search_limiter is None:
            governance = self.settings.governance
            self._search_limiter = SlidingWindowRateLimiter(
                governance.search_rate_limit, governance.rate_window_seconds
            )
        return self._search_limiter

    def clear(self) -> None:
        """Clear all cached instances."""
        self._retriever = None
        self._pipeline = None
        self._embed_limiter = None
        self._query_limiter = None
        self._search_limiter = None


# Global service cache
_service_cache: ServiceCache | None = None


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    global _service_cache
    if _service_cache is None:
        _service_cache = ServiceCache()
    return _service_cache


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for work that needs one session per task."""
    return get_async_session_factory()


def get_identity(x_user_id: str | None = Header(default=None, alias="X-User-Id")) -> str:
    """
    Requesting identity supplied by the authentication collaborator.

    Raises:
        AuthError: If the header is missing or blank
    """
    if x_user_id is None or not x_user_id.strip():
        raise AuthError()
    return x_user_id.strip()


def get_document_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> DocumentService:
    """
    Get document service instance.

    Args:
        db: Async database session (injected via Depends)
        cache: Provider cache (injected via Depends)

    Returns:
        DocumentService: Document service with embeddings and chunker
    """
    rag = cache.settings.rag
    return DocumentService(
        db=db,
        embeddings=cache.embeddings,
        chunker=Chunker(rag.chunk_size, rag.chunk_overlap),
        rate_limiter=cache.embed_limiter,
        admin_user_ids=cache.settings.governance.admin_user_ids,
    )


def get_query_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> QueryService:
    """
    Get query service instance.

    Args:
        db: Async database session (injected via Depends)
        cache: Provider cache (injected via Depends)

    Returns:
        QueryService: Query service with governance and citation tracking
    """
    governance = cache.settings.governance
    return QueryService(
        db=db,
        retriever=cache.retriever,
        pipeline=cache.pipeline,
        citation_tracker=CitationTracker(),
        budget_guard=BudgetGuard(
            governance.default_monthly_budget,
            governance.budget_period_days,
        ),
        query_limiter=cache.query_limiter,
        search_limiter=cache.search_limiter,
    )


def get_evaluation_service(
    db: AsyncSession = Depends(get_async_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    cache: ServiceCache = Depends(get_service_cache),
) -> EvaluationService:
    """
    Get evaluation service instance.

    The harness opens its own sessions from session_factory, one per
    question; db is only used for dataset management.
    """
    evaluation = cache.settings.evaluation
    harness = EvaluationHarness(
        session_factory=session_factory,
        pipeline=cache.pipeline,
        scorer=AnswerScorer(
            cache.evaluation_model,
            max_retries=cache.settings.providers.evaluation_max_retries,
        ),
        batch_size=evaluation.batch_size,
        max_questions=evaluation.max_questions,
        pass_threshold=evaluation.pass_threshold,
        question_timeout_s=evaluation.question_timeout_seconds,
    )
    return EvaluationService(db=db, harness=harness, max_questions=evaluation.max_questions)
