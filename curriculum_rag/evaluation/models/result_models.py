"""
Evaluation result models.

Per-question results, captured per-question errors, the run summary and
the report returned to callers.
"""

import uuid
from dataclasses import dataclass, field

from curriculum_rag.evaluation.models.metrics_models import EvaluationMetrics


@dataclass
class QuestionResult:
    """Scored outcome of one dataset question."""

    question_id: uuid.UUID
    position: int
    question: str
    generated_answer: str
    retrieved_chunks: list[dict]
    metrics: EvaluationMetrics
    passed: bool

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "question_id": str(self.question_id),
            "question": self.question,
            "generated_answer": self.generated_answer,
            "retrieved_chunks": self.retrieved_chunks,
            "metrics": self.metrics.to_dict(),
            "passed": self.passed,
        }


@dataclass
class EvaluationErrorRecord:
    """A question that could not be answered or scored."""

    question: str
    error: str

    def to_dict(self) -> dict:
        return {"question": self.question, "error": self.error}


@dataclass
class EvaluationSummary:
    """Aggregate of a run.

    Averages and pass_rate cover scored questions only; errored
    questions count toward total_questions and errors.
    """

    total_questions: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0
    pass_rate: float = 0.0
    avg_faithfulness: float = 0.0
    avg_relevance: float = 0.0
    avg_coverage: float = 0.0
    avg_overall: float = 0.0

    @classmethod
    def from_results(
        cls,
        total_questions: int,
        results: list[QuestionResult],
        error_count: int,
    ) -> "EvaluationSummary":
        """Build a summary from scored results."""
        scored = len(results)
        if scored == 0:
            return cls(total_questions=total_questions, errors=error_count)

        passed = sum(1 for result in results if result.passed)
        return cls(
            total_questions=total_questions,
            passed=passed,
            failed=scored - passed,
            errors=error_count,
            pass_rate=passed / scored,
            avg_faithfulness=sum(r.metrics.faithfulness for r in results) / scored,
            avg_relevance=sum(r.metrics.relevance for r in results) / scored,
            avg_coverage=sum(r.metrics.coverage for r in results) / scored,
            avg_overall=sum(r.metrics.overall for r in results) / scored,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "total_questions": self.total_questions,
            "passed": self.passed,
            "failed": self.failed,
            "errors": self.errors,
            "pass_rate": round(self.pass_rate, 3),
            "avg_faithfulness": round(self.avg_faithfulness, 3),
            "avg_relevance": round(self.avg_relevance, 3),
            "avg_coverage": round(self.avg_coverage, 3),
            "avg_overall": round(self.avg_overall, 3),
        }


@dataclass
class EvaluationReport:
    """Outcome of one harness run."""

    run_id: uuid.UUID
    results: list[QuestionResult] = field(default_factory=list)
    errors: list[EvaluationErrorRecord] = field(default_factory=list)
    summary: EvaluationSummary = field(default_factory=EvaluationSummary)

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/storage."""
        return {
            "run_id": str(self.run_id),
            "results": [result.to_dict() for result in self.results],
            "errors": [error.to_dict() for error in self.errors],
            "summary": self.summary.to_dict(),
        }
