"""Evaluation data containers."""

from curriculum_rag.evaluation.models.metrics_models import EvaluationMetrics
from curriculum_rag.evaluation.models.result_models import (
    EvaluationErrorRecord,
    EvaluationReport,
    EvaluationSummary,
    QuestionResult,
)

__all__ = [
    "EvaluationErrorRecord",
    "EvaluationMetrics",
    "EvaluationReport",
    "EvaluationSummary",
    "QuestionResult",
]
