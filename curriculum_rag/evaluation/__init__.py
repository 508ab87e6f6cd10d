"""
Answer quality evaluation.

Scores generated answers against labeled datasets with an LLM judge and
aggregates per-run summaries.

Usage:
    harness = EvaluationHarness(session_factory, pipeline, scorer)
    report = await harness.run(dataset_id, identity="evaluator")
    print(report.summary.pass_rate)
"""

from curriculum_rag.evaluation.evaluators.harness import EvaluationHarness
from curriculum_rag.evaluation.evaluators.scorer import AnswerScorer
from curriculum_rag.evaluation.models.metrics_models import EvaluationMetrics
from curriculum_rag.evaluation.models.result_models import (
    EvaluationErrorRecord,
    EvaluationReport,
    EvaluationSummary,
    QuestionResult,
)

__all__ = [
    "AnswerScorer",
    "EvaluationErrorRecord",
    "EvaluationHarness",
    "EvaluationMetrics",
    "EvaluationReport",
    "EvaluationSummary",
    "QuestionResult",
]
