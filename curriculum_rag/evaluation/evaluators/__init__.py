"""Evaluation runners and judges."""

from curriculum_rag.evaluation.evaluators.harness import EvaluationHarness
from curriculum_rag.evaluation.evaluators.scorer import AnswerScorer

__all__ = ["AnswerScorer", "EvaluationHarness"]
