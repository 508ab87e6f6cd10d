"""
Query service for memory-aware question answering.

Orchestrates the full query flow: governance checks, retrieval, context
assembly, synthesis, query logging, citation tracking and conversation
write-back.

Dependencies: curriculum_rag.core, curriculum_rag.boundary.db
System role: Query orchestration layer
"""

import logging
import time
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from curriculum_rag.boundary.db.CRUD.conversation_crud import conversation_crud
from curriculum_rag.boundary.db.CRUD.query_crud import query_log_crud
from curriculum_rag.boundary.db.models.conversation_model import TurnRole
from curriculum_rag.boundary.db.models.query_model import QueryLogModel
from curriculum_rag.core.citation_tracker import CitationTracker
from curriculum_rag.core.exceptions import BudgetExceededError, NotFoundError
from curriculum_rag.core.governance import BudgetGuard
from curriculum_rag.core.pipeline import AnswerPipeline, PipelineOutput
from curriculum_rag.core.rate_limiter import SlidingWindowRateLimiter
from curriculum_rag.core.retriever import HybridRetriever
from curriculum_rag.models.citation import Citation
from curriculum_rag.models.query import QueryMetadata, QueryResponse, SourceDocument, TokenUsage
from curriculum_rag.models.retrieval import SearchMetadata, SearchResponse

logger = logging.getLogger(__name__)

RECORD_ATTEMPTS = 3


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class QueryService:
    """
    Query service for grounded answers.

    Coordinates rate limiting, budget checks, the answer pipeline and the
    audit trail for a single request.
    """

    def __init__(
        self,
        db: AsyncSession,
        retriever: HybridRetriever,
        pipeline: AnswerPipeline,
        citation_tracker: CitationTracker,
        budget_guard: BudgetGuard | None = None,
        query_limiter: SlidingWindowRateLimiter | None = None,
        search_limiter: SlidingWindowRateLimiter | None = None,
    ) -> None:
        """
        Initialize query service.

        Args:
            db: AsyncSession for the request
            retriever: Hybrid retriever used by search
            pipeline: Answer pipeline (retrieve, assemble, synthesize)
            citation_tracker: Provenance recorder
            budget_guard: Optional spend governance
            query_limiter: Optional per-identity limit on queries
            search_limiter: Optional per-identity limit on searches
        """
        self.db = db
        self.retriever = retriever
        self.pipeline = pipeline
        self.citation_tracker = citation_tracker
        self.budget_guard = budget_guard
        self.query_limiter = query_limiter
        self.search_limiter = search_limiter

    async def search(self, query: str, identity: str, limit: int | None = None) -> SearchResponse:
        """
        Raw hybrid search without synthesis.

        Args:
            query: Search text
            identity: Requesting identity
            limit: Maximum results

        Returns:
            SearchResponse with ranked chunks and timing metadata
        """
        if self.search_limiter is not None:
            self.search_limiter.check(f"search:{identity}")

        started = time.perf_counter()
        results = await self.retriever.retrieve(self.db, query, identity, limit=limit)
        avg = sum(r.score for r in results) / len(results) if results else 0.0
        return SearchResponse(
            results=results,
            metadata=SearchMetadata(
                total_results=len(results),
                latency_ms=_elapsed_ms(started),
                avg_relevance=round(avg, 4),
            ),
        )

    async def answer(
        self,
        query: str,
        identity: str,
        conversation_id: str | None = None,
        limit: int | None = None,
    ) -> QueryResponse:
        """
        Answer a learner question from curriculum content and memory.

        Flow:
        1. Enforce rate limit and budget
        2. Run the answer pipeline
        3. Log the query and record citations for the synthesized chunks
        4. Append the user and assistant turns to the conversation
        5. Charge the cost and commit

        Steps 3-5 run in one transaction that is retried when a concurrent
        answer on the same conversation claims the next turn index first.
        The pipeline is not run again.

        Args:
            query: Learner question
            identity: Requesting identity
            conversation_id: Conversation to draw memory from and append to
            limit: Retrieval limit

        Returns:
            QueryResponse with answer, citations and metadata
        """
        if self.query_limiter is not None:
            self.query_limiter.check(f"query:{identity}")

        started = time.perf_counter()
        try:
            if self.budget_guard is not None:
                await self.budget_guard.check(self.db, identity)
            output = await self.pipeline.run(
                self.db,
                query,
                identity,
                conversation_id=conversation_id,
                limit=limit,
            )
        except BudgetExceededError:
            # Keep the exceeded flag (and any period reset) written by the check.
            await self.db.commit()
            raise
        except Exception:
            await self.db.rollback()
            raise

        chunks = output.context.chunks
        synthesis = output.synthesis
        avg_relevance = sum(c.score for c in chunks) / len(chunks) if chunks else 0.0
        latency_ms = _elapsed_ms(started)

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(RECORD_ATTEMPTS),
            retry=retry_if_exception_type(IntegrityError),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:answer - Conversation {conversation_id} changed concurrently, "
                f"retry {retry_state.attempt_number}/{RECORD_ATTEMPTS - 1}"
            ),
            reraise=True,
        ):
            with attempt:
                log, citations = await self._record(
                    query, identity, conversation_id, output, avg_relevance, latency_ms
                )

        logger.info(
            f"{__name__}:answer - query_id={log.id} sources={len(citations)} "
            f"memory={output.context.has_memory_context} latency={latency_ms}ms"
        )
        return QueryResponse(
            answer=synthesis.answer,
            sources=citations,
            has_memory_context=output.context.has_memory_context,
            conversation_id=conversation_id,
            query_id=log.id,
            metadata=QueryMetadata(
                sources_used=len(citations),
                avg_relevance=round(avg_relevance, 4),
                latency_ms=latency_ms,
                cost=synthesis.cost,
                token_usage=TokenUsage(
                    input_tokens=synthesis.input_tokens,
                    output_tokens=synthesis.output_tokens,
                    total_tokens=synthesis.total_tokens,
                ),
                confidence=synthesis.confidence,
                contradictions=synthesis.contradictions,
                source_documents=[
                    SourceDocument(
                        document_id=group.document_id,
                        document_title=group.document_title,
                        source_numbers=group.source_numbers,
                    )
                    for group in synthesis.documents
                ],
            ),
        )

    async def _record(
        self,
        query: str,
        identity: str,
        conversation_id: str | None,
        output: PipelineOutput,
        avg_relevance: float,
        latency_ms: float,
    ) -> tuple[QueryLogModel, list[Citation]]:
        """Persist the query log, citations, conversation turns and charge."""
        synthesis = output.synthesis
        try:
            log = await query_log_crud.create(
                self.db,
                user_id=identity,
                conversation_id=conversation_id,
                query=query,
                response=synthesis.answer,
                chunks_used=len(output.context.chunks),
                avg_relevance=avg_relevance,
                latency_ms=latency_ms,
                input_tokens=synthesis.input_tokens,
                output_tokens=synthesis.output_tokens,
                cost=synthesis.cost,
            )
            citations = await self.citation_tracker.track(self.db, log.id, output.context.chunks)

            if conversation_id:
                await conversation_crud.append_turn(
                    self.db, conversation_id, identity, TurnRole.USER, query
                )
                await conversation_crud.append_turn(
                    self.db, conversation_id, identity, TurnRole.ASSISTANT, synthesis.answer
                )

            if self.budget_guard is not None:
                await self.budget_guard.charge(self.db, identity, synthesis.cost)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return log, citations

    async def get_citations(self, query_id: UUID, identity: str) -> list[Citation]:
        """
        Citations of a query the identity asked.

        Raises:
            NotFoundError: If the query does not exist or belongs to another identity
        """
        log = await query_log_crud.get_by_id(self.db, query_id)
        if log is None or log.user_id != identity:
            raise NotFoundError(
                f"Query not found: {query_id}",
                details={"query_id": str(query_id)},
            )
        return await self.citation_tracker.for_query(self.db, query_id)
