"""
Answer quality metrics.

All scores are normalized to the 0-1 range.
"""

from dataclasses import dataclass


@dataclass
class EvaluationMetrics:
    """Judge scores for one answer.

    faithfulness: answer avoids claims unsupported by the context
    relevance: answer addresses the question
    coverage: answer uses the retrieved evidence
    """

    faithfulness: float = 0.0
    relevance: float = 0.0
    coverage: float = 0.0

    @property
    def overall(self) -> float:
        """Arithmetic mean of the three scores."""
        return (self.faithfulness + self.relevance + self.coverage) / 3

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "faithfulness": round(self.faithfulness, 3),
            "relevance": round(self.relevance, 3),
            "coverage": round(self.coverage, 3),
            "overall": round(self.overall, 3),
        }
