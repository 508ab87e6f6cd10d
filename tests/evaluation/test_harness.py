"""
Tests for the batched evaluation harness.

Per-question sessions run concurrently, so these tests use a file-backed
SQLite database instead of the shared in-memory connection.
"""

import asyncio
import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from curriculum_rag.boundary.db.base import Base
from curriculum_rag.boundary.db.CRUD.evaluation_crud import (
    evaluation_dataset_crud,
    evaluation_run_crud,
)
from curriculum_rag.boundary.db.models.document_model import Visibility
from curriculum_rag.boundary.db.models.evaluation_model import RunStatus
from curriculum_rag.core.exceptions import DatasetNotFoundError, ValidationError
from curriculum_rag.core.memory_integrator import CHUNK, AssembledContext, ContextItem
from curriculum_rag.core.pipeline import PipelineOutput
from curriculum_rag.core.synthesizer import SynthesisResult
from curriculum_rag.evaluation.evaluators.harness import EvaluationHarness
from curriculum_rag.evaluation.models.metrics_models import EvaluationMetrics
from curriculum_rag.models.retrieval import RetrievedChunk

QUESTIONS = [f"Question {n}?" for n in range(1, 6)]


class FakePipeline:
    """Answers every question from one fixed chunk; can fail or stall on chosen questions."""

    def __init__(self, fail_on: set[str] | None = None, stall_on: set[str] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.stall_on = stall_on or set()
        self.chunk = RetrievedChunk(
            chunk_id=uuid.uuid4(),
            document_id=uuid.uuid4(),
            content="Reference material.",
            similarity=0.8,
            lexical_score=0.5,
            score=0.71,
            document_title="Doc",
            visibility=Visibility.SYSTEM,
        )

    async def run(self, session, query, identity, conversation_id=None, limit=None) -> PipelineOutput:
        if query in self.fail_on:
            raise RuntimeError("pipeline exploded")
        if query in self.stall_on:
            await asyncio.sleep(5)
        item = ContextItem(
            key=str(self.chunk.chunk_id),
            kind=CHUNK,
            content=self.chunk.content,
            relevance=self.chunk.score,
            chunk=self.chunk,
        )
        return PipelineOutput(
            context=AssembledContext(items=[item]),
            synthesis=SynthesisResult(
                answer=f"Answer to {query}",
                input_tokens=10,
                output_tokens=5,
                cost=0.0,
                model="gemini-2.5-flash",
            ),
        )


class FakeScorer:
    """Scores answers from a question -> metrics table."""

    def __init__(self, scores: dict[str, float] | None = None, default: float = 0.9) -> None:
        self.scores = scores or {}
        self.default = default

    async def score(self, question, answer, contexts, ground_truth=None) -> EvaluationMetrics:
        value = self.scores.get(question, self.default)
        return EvaluationMetrics(faithfulness=value, relevance=value, coverage=value)


@pytest.fixture
async def file_session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'evaluation.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def make_dataset(file_session_factory):
    async def make(questions: list[str]) -> uuid.UUID:
        async with file_session_factory() as session:
            dataset = await evaluation_dataset_crud.create_with_questions(
                session,
                name="basics",
                questions=[(question, f"Reference for {question}") for question in questions],
                owner_id="instructor",
            )
            await session.commit()
            return dataset.id

    return make


class TestEvaluationHarness:
    @pytest.mark.asyncio
    async def test_failing_question_is_isolated(self, file_session_factory, make_dataset) -> None:
        dataset_id = await make_dataset(QUESTIONS)
        harness = EvaluationHarness(
            file_session_factory,
            FakePipeline(fail_on={"Question 3?"}),
            FakeScorer(scores={"Question 5?": 0.2}),
            batch_size=2,
        )

        report = await harness.run(dataset_id, identity="evaluator")

        assert report.summary.total_questions == 5
        assert report.summary.errors == 1
        assert report.summary.passed + report.summary.failed == 4
        assert report.summary.passed == 3
        assert report.summary.pass_rate == pytest.approx(0.75)
        assert [r.question for r in report.results] == [
            "Question 1?",
            "Question 2?",
            "Question 4?",
            "Question 5?",
        ]
        assert report.errors[0].question == "Question 3?"
        assert "pipeline exploded" in report.errors[0].error

    @pytest.mark.asyncio
    async def test_results_and_run_persisted(self, file_session_factory, make_dataset) -> None:
        dataset_id = await make_dataset(QUESTIONS[:3])
        harness = EvaluationHarness(file_session_factory, FakePipeline(), FakeScorer())

        report = await harness.run(dataset_id, identity="evaluator")

        async with file_session_factory() as session:
            run = await evaluation_run_crud.get_by_id(session, report.run_id)
            rows = await evaluation_run_crud.get_results(session, report.run_id)
        assert run.status == RunStatus.COMPLETED
        assert run.requested_by == "evaluator"
        assert run.summary["passed"] == 3
        assert len(rows) == 3
        assert all(row.passed for row in rows)
        assert rows[0].retrieved_chunks[0]["relevance"] == pytest.approx(0.71)

    @pytest.mark.asyncio
    async def test_pass_threshold_is_inclusive(self, file_session_factory, make_dataset) -> None:
        dataset_id = await make_dataset(["Question 1?", "Question 2?"])
        harness = EvaluationHarness(
            file_session_factory,
            FakePipeline(),
            FakeScorer(scores={"Question 1?": 0.75, "Question 2?": 0.5}),
            pass_threshold=0.7,
        )

        report = await harness.run(dataset_id, identity="evaluator")

        assert [r.passed for r in report.results] == [True, False]
        assert report.summary.avg_overall == pytest.approx(0.625)

    @pytest.mark.asyncio
    async def test_question_timeout_recorded_as_error(self, file_session_factory, make_dataset) -> None:
        dataset_id = await make_dataset(["Question 1?", "Question 2?"])
        harness = EvaluationHarness(
            file_session_factory,
            FakePipeline(stall_on={"Question 2?"}),
            FakeScorer(),
            question_timeout_s=0.1,
        )

        report = await harness.run(dataset_id, identity="evaluator")

        assert len(report.results) == 1
        assert report.errors[0].question == "Question 2?"
        assert "timed out" in report.errors[0].error

    @pytest.mark.asyncio
    async def test_max_questions_bounds_run(self, file_session_factory, make_dataset) -> None:
        dataset_id = await make_dataset(QUESTIONS)
        harness = EvaluationHarness(
            file_session_factory, FakePipeline(), FakeScorer(), max_questions=2
        )

        report = await harness.run(dataset_id, identity="evaluator")

        assert report.summary.total_questions == 2

    @pytest.mark.asyncio
    async def test_missing_dataset(self, file_session_factory) -> None:
        harness = EvaluationHarness(file_session_factory, FakePipeline(), FakeScorer())

        with pytest.raises(DatasetNotFoundError):
            await harness.run(uuid.uuid4(), identity="evaluator")

    @pytest.mark.asyncio
    async def test_empty_dataset(self, file_session_factory, make_dataset) -> None:
        dataset_id = await make_dataset([])
        harness = EvaluationHarness(file_session_factory, FakePipeline(), FakeScorer())

        with pytest.raises(ValidationError):
            await harness.run(dataset_id, identity="evaluator")

    def test_invalid_batch_size(self) -> None:
        with pytest.raises(ValidationError):
            EvaluationHarness(None, FakePipeline(), FakeScorer(), batch_size=0)
