"""
Batched evaluation harness.

Runs every question of a dataset through the answer pipeline and the
judge, a fixed-width batch at a time. Each question uses its own
database session and timeout; a failing question is recorded as an
error and never aborts the run.

Dependencies: asyncio, sqlalchemy, curriculum_rag.core, curriculum_rag.evaluation
System role: Automated answer quality evaluation
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from curriculum_rag.boundary.db.CRUD.evaluation_crud import (
    evaluation_dataset_crud,
    evaluation_run_crud,
)
from curriculum_rag.boundary.db.models.evaluation_model import RunStatus
from curriculum_rag.core.exceptions import DatasetNotFoundError, ValidationError
from curriculum_rag.core.pipeline import AnswerPipeline
from curriculum_rag.evaluation.evaluators.scorer import AnswerScorer
from curriculum_rag.evaluation.models.result_models import (
    EvaluationErrorRecord,
    EvaluationReport,
    EvaluationSummary,
    QuestionResult,
)
from curriculum_rag.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PendingQuestion:
    """Detached copy of a dataset question."""

    question_id: uuid.UUID
    position: int
    question: str
    ground_truth: str | None


class EvaluationHarness:
    """Evaluates a dataset through the answer pipeline.

    Usage:
        harness = EvaluationHarness(get_async_session_factory(), pipeline, scorer)
        report = await harness.run(dataset_id, identity="evaluator")
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        pipeline: AnswerPipeline,
        scorer: AnswerScorer,
        batch_size: int = 5,
        max_questions: int = 200,
        pass_threshold: float = 0.7,
        question_timeout_s: float = 60.0,
    ) -> None:
        """Initialize harness.

        Args:
            session_factory: Factory for per-question sessions
            pipeline: Answer pipeline run for each question
            scorer: Judge producing per-answer metrics
            batch_size: Questions evaluated concurrently
            max_questions: Questions loaded per run
            pass_threshold: Minimum overall score to pass
            question_timeout_s: Upper bound on one question's pipeline and scoring
        """
        if batch_size < 1:
            raise ValidationError("batch_size must be at least 1", field="batch_size")
        self.session_factory = session_factory
        self.pipeline = pipeline
        self.scorer = scorer
        self.batch_size = batch_size
        self.max_questions = max_questions
        self.pass_threshold = pass_threshold
        self.question_timeout_s = question_timeout_s

    async def run(self, dataset_id: uuid.UUID, identity: str) -> EvaluationReport:
        """Evaluate a dataset.

        Args:
            dataset_id: Dataset to evaluate
            identity: Identity the pipeline runs as

        Returns:
            EvaluationReport with results in dataset order, errors and summary

        Raises:
            DatasetNotFoundError: If the dataset does not exist
            ValidationError: If the dataset has no questions
        """
        started = time.perf_counter()
        run_id, questions = await self._start_run(dataset_id, identity)
        logger.info(
            f"{__name__}:run - run={run_id} dataset={dataset_id} questions={len(questions)} "
            f"batch_size={self.batch_size}"
        )

        results: list[QuestionResult] = []
        errors: list[EvaluationErrorRecord] = []
        for offset in range(0, len(questions), self.batch_size):
            batch = questions[offset : offset + self.batch_size]
            outcomes = await asyncio.gather(
                *(self._evaluate_with_timeout(run_id, dataset_id, identity, pending) for pending in batch),
                return_exceptions=True,
            )
            for pending, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    log_exception_with_context(
                        logger,
                        "Evaluation question failed",
                        outcome,
                        run_id=run_id,
                        question_id=pending.question_id,
                    )
                    errors.append(
                        EvaluationErrorRecord(question=pending.question, error=_describe(outcome))
                    )
                else:
                    results.append(outcome)

        results.sort(key=lambda result: result.position)
        summary = EvaluationSummary.from_results(len(questions), results, len(errors))

        async with self.session_factory() as session:
            await evaluation_run_crud.finish(
                session, run_id, RunStatus.COMPLETED, summary=summary.to_dict()
            )
            await session.commit()

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Evaluation complete in {elapsed_ms:.1f}ms, pass rate: {summary.pass_rate:.3f} "
            f"({summary.errors} errors)"
        )
        return EvaluationReport(run_id=run_id, results=results, errors=errors, summary=summary)

    async def _start_run(
        self,
        dataset_id: uuid.UUID,
        identity: str,
    ) -> tuple[uuid.UUID, list[_PendingQuestion]]:
        async with self.session_factory() as session:
            dataset = await evaluation_dataset_crud.get_by_id(session, dataset_id)
            if dataset is None:
                raise DatasetNotFoundError(str(dataset_id))

            rows = await evaluation_dataset_crud.get_questions(
                session, dataset_id, limit=self.max_questions
            )
            if not rows:
                raise ValidationError(
                    "Dataset has no questions",
                    details={"dataset_id": str(dataset_id)},
                )

            questions = [
                _PendingQuestion(
                    question_id=row.id,
                    position=index,
                    question=row.question,
                    ground_truth=row.ground_truth_answer,
                )
                for index, row in enumerate(rows)
            ]
            run = await evaluation_run_crud.start(session, dataset_id, identity)
            await session.commit()
            return run.id, questions

    async def _evaluate_with_timeout(
        self,
        run_id: uuid.UUID,
        dataset_id: uuid.UUID,
        identity: str,
        pending: _PendingQuestion,
    ) -> QuestionResult:
        try:
            return await asyncio.wait_for(
                self._evaluate_question(run_id, dataset_id, identity, pending),
                timeout=self.question_timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"Question timed out after {self.question_timeout_s:g}s"
            ) from e

    async def _evaluate_question(
        self,
        run_id: uuid.UUID,
        dataset_id: uuid.UUID,
        identity: str,
        pending: _PendingQuestion,
    ) -> QuestionResult:
        async with self.session_factory() as session:
            output = await self.pipeline.run(session, pending.question, identity)
            chunks = output.context.chunks
            metrics = await self.scorer.score(
                question=pending.question,
                answer=output.synthesis.answer,
                contexts=[chunk.content for chunk in chunks],
                ground_truth=pending.ground_truth,
            )
            retrieved = [
                {"chunk_id": str(chunk.chunk_id), "relevance": round(chunk.score, 4)}
                for chunk in chunks
            ]
            passed = metrics.overall >= self.pass_threshold

            await evaluation_run_crud.add_result(
                session,
                run_id=run_id,
                dataset_id=dataset_id,
                question_id=pending.question_id,
                generated_answer=output.synthesis.answer,
                retrieved_chunks=retrieved,
                metrics=metrics.to_dict(),
                passed=passed,
            )
            await session.commit()

        return QuestionResult(
            question_id=pending.question_id,
            position=pending.position,
            question=pending.question,
            generated_answer=output.synthesis.answer,
            retrieved_chunks=retrieved,
            metrics=metrics,
            passed=passed,
        )


def _describe(error: BaseException) -> str:
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__
