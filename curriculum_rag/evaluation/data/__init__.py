"""Ground truth dataset files and loaders."""

from curriculum_rag.evaluation.data.datasets import GroundTruthDataset, GroundTruthSample

__all__ = ["GroundTruthDataset", "GroundTruthSample"]
