"""
Tests for the LLM-as-judge scorer: reply parsing, clamping and retries.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from tenacity import wait_none

from curriculum_rag.core.exceptions import ProviderError, ScoringError
from curriculum_rag.evaluation.evaluators.scorer import AnswerScorer

VALID = '{"faithfulness": 0.9, "relevance": 0.8, "coverage": 0.7, "reasoning": "grounded"}'


def make_scorer(responses: list[str], max_retries: int = 0) -> AnswerScorer:
    return AnswerScorer(FakeListChatModel(responses=responses), max_retries=max_retries, wait=wait_none())


class TestParseResponse:
    @pytest.fixture
    def scorer(self) -> AnswerScorer:
        return make_scorer([VALID])

    def test_plain_json(self, scorer) -> None:
        metrics = scorer._parse_response(VALID, "q")

        assert (metrics.faithfulness, metrics.relevance, metrics.coverage) == (0.9, 0.8, 0.7)
        assert metrics.overall == pytest.approx(0.8)

    def test_json_fence(self, scorer) -> None:
        metrics = scorer._parse_response(f"Here you go:\n```json\n{VALID}\n```", "q")

        assert metrics.relevance == 0.8

    def test_bare_fence(self, scorer) -> None:
        metrics = scorer._parse_response(f"```\n{VALID}\n```", "q")

        assert metrics.coverage == 0.7

    def test_scores_clamped(self, scorer) -> None:
        metrics = scorer._parse_response(
            '{"faithfulness": 1.4, "relevance": -0.2, "coverage": 0.5}', "q"
        )

        assert (metrics.faithfulness, metrics.relevance, metrics.coverage) == (1.0, 0.0, 0.5)

    @pytest.mark.parametrize(
        "reply",
        [
            "The answer looks great!",
            '{"faithfulness": 0.9, "relevance": 0.8}',
            '{"faithfulness": "high", "relevance": 0.8, "coverage": 0.7}',
        ],
    )
    def test_unparseable_reply(self, scorer, reply) -> None:
        with pytest.raises(ScoringError) as exc_info:
            scorer._parse_response(reply, "What is TypeScript?")

        assert exc_info.value.category == "scoring"
        assert exc_info.value.details["question"] == "What is TypeScript?"


class TestScore:
    @pytest.mark.asyncio
    async def test_score(self) -> None:
        metrics = await make_scorer([VALID]).score(
            question="What is TypeScript?",
            answer="A typed superset of JavaScript [1].",
            contexts=["TypeScript is a typed superset of JavaScript."],
            ground_truth="A typed superset of JavaScript.",
        )

        assert metrics.to_dict() == {
            "faithfulness": 0.9,
            "relevance": 0.8,
            "coverage": 0.7,
            "overall": 0.8,
        }

    @pytest.mark.asyncio
    async def test_unparseable_without_retries(self) -> None:
        with pytest.raises(ScoringError):
            await make_scorer(["not json", VALID]).score("q", "a", [])

    @pytest.mark.asyncio
    async def test_retry_recovers(self) -> None:
        metrics = await make_scorer(["not json", VALID], max_retries=1).score("q", "a", [])

        assert metrics.faithfulness == 0.9

    @pytest.mark.asyncio
    async def test_provider_failure(self) -> None:
        chat_model = MagicMock()
        chat_model.ainvoke = AsyncMock(side_effect=RuntimeError("quota exhausted"))
        scorer = AnswerScorer(chat_model, max_retries=2, wait=wait_none())

        with pytest.raises(ProviderError):
            await scorer.score("q", "a", ["context"])

        assert chat_model.ainvoke.await_count == 3

    def test_prompt_includes_numbered_context(self) -> None:
        prompt = make_scorer([VALID])._build_prompt("q", "a", ["first", "second"], None)

        assert "[1] first" in prompt
        assert "[2] second" in prompt
        assert "(no reference answer provided)" in prompt
