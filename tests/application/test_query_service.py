"""
Test suite for QueryService.

Covers the end-to-end answer flow, citation provenance, conversation
memory write-back, rate limiting and budget governance.

System role: Verification of query orchestration
"""

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from curriculum_rag.application.services.query_service import QueryService
from curriculum_rag.boundary.db.CRUD.budget_crud import budget_crud
from curriculum_rag.boundary.db.CRUD.conversation_crud import conversation_crud
from curriculum_rag.boundary.db.CRUD.query_crud import citation_crud
from curriculum_rag.boundary.db.models.document_model import Visibility
from curriculum_rag.boundary.db.models.query_model import QueryLogModel
from curriculum_rag.core.citation_tracker import CitationTracker
from curriculum_rag.core.exceptions import BudgetExceededError, NotFoundError, RateLimitError
from curriculum_rag.core.governance import BudgetGuard
from curriculum_rag.core.rate_limiter import SlidingWindowRateLimiter

ANSWER = "TypeScript is a typed superset of JavaScript [1]."


@pytest.fixture
async def seeded(document_service):
    """One public TypeScript document."""
    return await document_service.ingest(
        "TypeScript Basics",
        "TypeScript is a typed superset of JavaScript.",
        Visibility.PUBLIC,
        "author",
    )


@pytest.fixture
def build_service(test_async_db, retriever, pipeline_factory):
    def build(responses=None, **kwargs) -> QueryService:
        return QueryService(
            db=test_async_db,
            retriever=retriever,
            pipeline=pipeline_factory(responses or [ANSWER]),
            citation_tracker=CitationTracker(),
            **kwargs,
        )

    return build


class TestAnswer:
    @pytest.mark.asyncio
    async def test_answer_with_single_citation(self, build_service, seeded, test_async_db) -> None:
        service = build_service()

        response = await service.answer("What is TypeScript?", "learner")

        assert "typed superset" in response.answer
        assert response.has_memory_context is False
        assert len(response.sources) == 1
        assert response.sources[0].document_id == seeded.document_id
        assert response.sources[0].rank == 1
        assert response.sources[0].relevance_score > 0
        assert response.metadata.sources_used == 1
        assert response.metadata.cost > 0
        assert response.metadata.confidence == 0.5
        assert response.metadata.contradictions == []
        assert [(d.document_id, d.source_numbers) for d in response.metadata.source_documents] == [
            (seeded.document_id, [1])
        ]
        assert response.metadata.token_usage.total_tokens == (
            response.metadata.token_usage.input_tokens + response.metadata.token_usage.output_tokens
        )

        rows = await citation_crud.get_by_query_id(test_async_db, response.query_id)
        assert len(rows) == 1

    @pytest.mark.asyncio
    async def test_answer_without_sources(self, build_service, test_async_db) -> None:
        service = build_service(["I could not find this in the course material."])

        response = await service.answer("What is TypeScript?", "learner")

        assert response.sources == []
        assert response.metadata.avg_relevance == 0.0
        count = await test_async_db.execute(select(func.count()).select_from(QueryLogModel))
        assert count.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_conversation_turns_written_back(self, build_service, seeded, test_async_db) -> None:
        service = build_service([ANSWER, "Interfaces describe object shapes [1]."])

        first = await service.answer("What is TypeScript?", "learner", conversation_id="conv-1")
        second = await service.answer("And its interfaces?", "learner", conversation_id="conv-1")

        assert first.has_memory_context is False
        assert second.has_memory_context is True
        turns = await conversation_crud.get_recent(test_async_db, "conv-1", "learner", limit=10)
        assert [turn.content for turn in turns] == [
            "Interfaces describe object shapes [1].",
            "And its interfaces?",
            ANSWER,
            "What is TypeScript?",
        ]

    @pytest.mark.asyncio
    async def test_memory_is_scoped_to_identity(self, build_service, seeded) -> None:
        service = build_service([ANSWER, ANSWER])

        await service.answer("What is TypeScript?", "learner", conversation_id="conv-1")
        other = await service.answer("What is TypeScript?", "someone-else", conversation_id="conv-1")

        assert other.has_memory_context is False

    @pytest.mark.asyncio
    async def test_turn_index_clash_retries_write_only(
        self, build_service, seeded, test_async_db, monkeypatch
    ) -> None:
        service = build_service()
        append_turn = conversation_crud.append_turn
        calls = []

        async def clash_once(session, conversation_id, user_id, role, content):
            calls.append(role)
            if len(calls) == 1:
                raise IntegrityError(
                    "INSERT INTO conversation_turns", {}, Exception("UNIQUE constraint failed")
                )
            return await append_turn(session, conversation_id, user_id, role, content)

        monkeypatch.setattr(conversation_crud, "append_turn", clash_once)

        response = await service.answer("What is TypeScript?", "learner", conversation_id="conv-1")

        assert response.answer == ANSWER
        assert len(calls) == 3
        count = await test_async_db.execute(select(func.count()).select_from(QueryLogModel))
        assert count.scalar_one() == 1
        turns = await conversation_crud.get_recent(test_async_db, "conv-1", "learner", limit=10)
        assert [turn.turn_index for turn in turns] == [1, 0]


class TestGovernance:
    @pytest.mark.asyncio
    async def test_rate_limited(self, build_service, seeded) -> None:
        service = build_service(
            [ANSWER, ANSWER], query_limiter=SlidingWindowRateLimiter(limit=1, window_seconds=60)
        )
        await service.answer("What is TypeScript?", "learner")

        with pytest.raises(RateLimitError):
            await service.answer("What is TypeScript?", "learner")

    @pytest.mark.asyncio
    async def test_budget_exhausted_logs_nothing(self, build_service, seeded, test_async_db) -> None:
        service = build_service(budget_guard=BudgetGuard(default_monthly_budget=0.0))

        with pytest.raises(BudgetExceededError):
            await service.answer("What is TypeScript?", "learner")

        count = await test_async_db.execute(select(func.count()).select_from(QueryLogModel))
        assert count.scalar_one() == 0

    @pytest.mark.asyncio
    async def test_budget_exceeded_flag_persisted(self, build_service, seeded, test_async_db) -> None:
        service = build_service(budget_guard=BudgetGuard(default_monthly_budget=0.0))

        with pytest.raises(BudgetExceededError):
            await service.answer("What is TypeScript?", "learner")
        await test_async_db.rollback()

        budget = await budget_crud.get_by_user(test_async_db, "learner")
        assert budget.budget_exceeded is True

    @pytest.mark.asyncio
    async def test_cost_is_charged(self, build_service, seeded) -> None:
        guard = BudgetGuard(default_monthly_budget=5.0)
        service = build_service(budget_guard=guard)

        response = await service.answer("What is TypeScript?", "learner")

        budget = await guard.check(service.db, "learner")
        assert budget.current_spend == pytest.approx(response.metadata.cost)


class TestSearch:
    @pytest.mark.asyncio
    async def test_search_metadata(self, build_service, seeded) -> None:
        response = await build_service().search("What is TypeScript?", "learner")

        assert response.metadata.total_results == 1
        assert response.results[0].document_title == "TypeScript Basics"
        assert response.metadata.avg_relevance == pytest.approx(response.results[0].score, abs=1e-4)

    @pytest.mark.asyncio
    async def test_search_rate_limited_separately(self, build_service, seeded) -> None:
        limiter = SlidingWindowRateLimiter(limit=1, window_seconds=60)
        service = build_service(query_limiter=limiter, search_limiter=limiter)

        await service.search("TypeScript", "learner")
        await service.answer("What is TypeScript?", "learner")
        with pytest.raises(RateLimitError):
            await service.search("TypeScript", "learner")


class TestCitations:
    @pytest.mark.asyncio
    async def test_owner_reads_citations(self, build_service, seeded) -> None:
        service = build_service()
        response = await service.answer("What is TypeScript?", "learner")

        citations = await service.get_citations(response.query_id, "learner")

        assert [c.chunk_id for c in citations] == [c.chunk_id for c in response.sources]

    @pytest.mark.asyncio
    async def test_foreign_citations_not_found(self, build_service, seeded) -> None:
        service = build_service()
        response = await service.answer("What is TypeScript?", "learner")

        with pytest.raises(NotFoundError):
            await service.get_citations(response.query_id, "intruder")
        with pytest.raises(NotFoundError):
            await service.get_citations(uuid.uuid4(), "learner")
