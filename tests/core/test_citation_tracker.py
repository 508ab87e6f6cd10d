"""
Tests for citation persistence and retrieval.
"""

import uuid

import pytest

from curriculum_rag.boundary.db.CRUD.query_crud import query_log_crud
from curriculum_rag.boundary.db.models.document_model import Visibility
from curriculum_rag.core.citation_tracker import CitationTracker
from curriculum_rag.core.exceptions import ValidationError
from curriculum_rag.models.retrieval import RetrievedChunk


def make_chunk(score: float) -> RetrievedChunk:
    return RetrievedChunk(
        chunk_id=uuid.uuid4(),
        document_id=uuid.uuid4(),
        content=f"chunk scored {score}",
        similarity=score,
        lexical_score=0.0,
        score=score,
        document_title="Doc",
        visibility=Visibility.PUBLIC,
        owner_id="author",
    )


@pytest.fixture
async def query_id(test_async_db) -> uuid.UUID:
    log = await query_log_crud.create(test_async_db, user_id="learner", query="What is a closure?")
    return log.id


class TestTrack:
    @pytest.mark.asyncio
    async def test_ranks_follow_context_order(self, test_async_db, query_id) -> None:
        chunks = [make_chunk(0.9), make_chunk(0.6), make_chunk(0.3)]

        citations = await CitationTracker().track(test_async_db, query_id, chunks)

        assert [c.rank for c in citations] == [1, 2, 3]
        assert [c.chunk_id for c in citations] == [c.chunk_id for c in chunks]
        assert citations[0].relevance_score == pytest.approx(0.9)

    @pytest.mark.asyncio
    async def test_cited_subset_keeps_context_rank(self, test_async_db, query_id) -> None:
        chunks = [make_chunk(0.9), make_chunk(0.6), make_chunk(0.3)]

        citations = await CitationTracker().track(
            test_async_db, query_id, chunks, cited=[chunks[2].chunk_id]
        )

        assert len(citations) == 1
        assert citations[0].rank == 3

    @pytest.mark.asyncio
    async def test_chunk_outside_context_rejected(self, test_async_db, query_id) -> None:
        chunks = [make_chunk(0.9)]

        with pytest.raises(ValidationError):
            await CitationTracker().track(test_async_db, query_id, chunks, cited=[uuid.uuid4()])

        assert await CitationTracker().for_query(test_async_db, query_id) == []


class TestForQuery:
    @pytest.mark.asyncio
    async def test_returns_rank_order(self, test_async_db, query_id) -> None:
        tracker = CitationTracker()
        chunks = [make_chunk(0.4), make_chunk(0.2)]
        await tracker.track(test_async_db, query_id, chunks)

        citations = await tracker.for_query(test_async_db, query_id)

        assert [c.rank for c in citations] == [1, 2]
        assert all(c.query_id == query_id for c in citations)

    @pytest.mark.asyncio
    async def test_unknown_query_has_no_citations(self, test_async_db) -> None:
        assert await CitationTracker().for_query(test_async_db, uuid.uuid4()) == []
