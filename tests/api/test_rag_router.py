"""
Test suite for the retrieval and query API endpoints.

Tests /api/v1/rag routes with FastAPI TestClient and a mocked
QueryService. Covers success responses, identity handling and the
mapping of domain errors to typed {message, category} payloads.

System role: Verification of query HTTP API
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from curriculum_rag.api.deps import get_query_service
from curriculum_rag.api.main import create_app
from curriculum_rag.core.exceptions import (
    BudgetExceededError,
    NotFoundError,
    ProviderError,
    RateLimitError,
)
from curriculum_rag.models.citation import Citation
from curriculum_rag.models.query import QueryMetadata, QueryResponse, TokenUsage
from curriculum_rag.models.retrieval import SearchMetadata, SearchResponse

HEADERS = {"X-User-Id": "learner"}
CONVERSATION_ID = "123e4567-e89b-12d3-a456-426614174000"


@pytest.fixture
def mock_service() -> MagicMock:
    service = MagicMock()
    service.search = AsyncMock()
    service.answer = AsyncMock()
    service.get_citations = AsyncMock()
    return service


@pytest.fixture
def client(mock_service) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_query_service] = lambda: mock_service
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def sample_citation() -> Citation:
    return Citation(
        id=uuid.uuid4(),
        query_id=uuid.uuid4(),
        chunk_id=uuid.uuid4(),
        document_id=uuid.uuid4(),
        rank=1,
        relevance_score=0.82,
        created_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def sample_response(sample_citation) -> QueryResponse:
    return QueryResponse(
        answer="TypeScript is a typed superset of JavaScript [1].",
        sources=[sample_citation],
        has_memory_context=False,
        query_id=sample_citation.query_id,
        metadata=QueryMetadata(
            sources_used=1,
            avg_relevance=0.82,
            latency_ms=12.5,
            cost=0.00001,
            token_usage=TokenUsage(input_tokens=40, output_tokens=12, total_tokens=52),
        ),
    )


class TestQueryEndpoint:
    def test_query_success(self, client, mock_service, sample_response) -> None:
        mock_service.answer.return_value = sample_response

        response = client.post(
            "/api/v1/rag/query",
            json={"query": "What is TypeScript?", "conversation_id": CONVERSATION_ID},
            headers=HEADERS,
        )

        assert response.status_code == 200
        data = response.json()
        assert "typed superset" in data["answer"]
        assert data["sources"][0]["rank"] == 1
        assert data["metadata"]["token_usage"]["total_tokens"] == 52
        mock_service.answer.assert_awaited_once_with(
            "What is TypeScript?", "learner", conversation_id=CONVERSATION_ID, limit=None
        )

    def test_query_length_capped(self, client, mock_service) -> None:
        response = client.post("/api/v1/rag/query", json={"query": "A" * 4001}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["category"] == "validation"
        mock_service.answer.assert_not_called()

    def test_query_at_cap_accepted(self, client, mock_service, sample_response) -> None:
        mock_service.answer.return_value = sample_response

        response = client.post("/api/v1/rag/query", json={"query": "A" * 4000}, headers=HEADERS)

        assert response.status_code == 200

    def test_null_bytes_stripped(self, client, mock_service, sample_response) -> None:
        mock_service.answer.return_value = sample_response

        response = client.post(
            "/api/v1/rag/query", json={"query": "  What\u0000 is TypeScript?\u0000 "}, headers=HEADERS
        )

        assert response.status_code == 200
        assert mock_service.answer.await_args.args[0] == "What is TypeScript?"

    def test_conversation_id_must_be_uuid(self, client, mock_service) -> None:
        response = client.post(
            "/api/v1/rag/query",
            json={"query": "What is TypeScript?", "conversation_id": "conv-1"},
            headers=HEADERS,
        )

        assert response.status_code == 400
        assert "conversation_id" in response.json()["message"]
        mock_service.answer.assert_not_called()

    def test_missing_identity(self, client, mock_service) -> None:
        response = client.post("/api/v1/rag/query", json={"query": "What is TypeScript?"})

        assert response.status_code == 401
        assert response.json() == {"message": "Authentication required", "category": "auth"}
        mock_service.answer.assert_not_called()

    def test_empty_query_is_validation_error(self, client) -> None:
        response = client.post("/api/v1/rag/query", json={"query": ""}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["category"] == "validation"

    def test_budget_exceeded(self, client, mock_service) -> None:
        mock_service.answer.side_effect = BudgetExceededError()

        response = client.post("/api/v1/rag/query", json={"query": "q"}, headers=HEADERS)

        assert response.status_code == 402
        assert response.json() == {"message": "Budget limit exceeded", "category": "budget"}

    def test_rate_limited(self, client, mock_service) -> None:
        mock_service.answer.side_effect = RateLimitError(retry_after=12.4)

        response = client.post("/api/v1/rag/query", json={"query": "q"}, headers=HEADERS)

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "12"
        assert response.json()["category"] == "rate_limit"

    def test_provider_failure(self, client, mock_service) -> None:
        mock_service.answer.side_effect = ProviderError("Synthesis failed", provider="synthesis")

        response = client.post("/api/v1/rag/query", json={"query": "q"}, headers=HEADERS)

        assert response.status_code == 502
        assert response.json()["category"] == "provider"

    def test_unexpected_failure_is_generic(self, client, mock_service) -> None:
        mock_service.answer.side_effect = RuntimeError("connection string leaked here")

        response = client.post("/api/v1/rag/query", json={"query": "q"}, headers=HEADERS)

        assert response.status_code == 500
        assert response.json() == {"message": "Query processing failed", "category": "server"}


class TestSearchEndpoint:
    def test_search_success(self, client, mock_service) -> None:
        mock_service.search.return_value = SearchResponse(
            results=[],
            metadata=SearchMetadata(total_results=0, latency_ms=1.0, avg_relevance=0.0),
        )

        response = client.post(
            "/api/v1/rag/search", json={"query": "closures", "limit": 3}, headers=HEADERS
        )

        assert response.status_code == 200
        assert response.json()["metadata"]["total_results"] == 0
        mock_service.search.assert_awaited_once_with("closures", "learner", limit=3)


class TestCitationsEndpoint:
    def test_citations(self, client, mock_service, sample_citation) -> None:
        mock_service.get_citations.return_value = [sample_citation]

        response = client.get(
            f"/api/v1/rag/queries/{sample_citation.query_id}/citations", headers=HEADERS
        )

        assert response.status_code == 200
        assert response.json()[0]["chunk_id"] == str(sample_citation.chunk_id)

    def test_citations_not_found(self, client, mock_service) -> None:
        query_id = uuid.uuid4()
        mock_service.get_citations.side_effect = NotFoundError(f"Query not found: {query_id}")

        response = client.get(f"/api/v1/rag/queries/{query_id}/citations", headers=HEADERS)

        assert response.status_code == 404
        assert response.json()["category"] == "not_found"

    def test_invalid_query_id(self, client) -> None:
        response = client.get("/api/v1/rag/queries/not-a-uuid/citations", headers=HEADERS)

        assert response.status_code == 400
