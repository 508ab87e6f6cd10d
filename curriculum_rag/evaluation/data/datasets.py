"""
Ground truth dataset management.

Schema:
- question: Learner question
- ground_truth_answer: Reference answer (optional)
- category: topic classification

Usage:
    ds = GroundTruthDataset.from_json("ground_truth.json")
    dataset = await ds.seed(session, name="week-1 basics")
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.CRUD.evaluation_crud import evaluation_dataset_crud
from curriculum_rag.boundary.db.models.evaluation_model import EvaluationDatasetModel

logger = logging.getLogger(__name__)


@dataclass
class GroundTruthSample:
    """Single labeled question."""

    question: str
    ground_truth_answer: str | None = None
    category: str = "general"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @staticmethod
    def from_dict(data: dict) -> "GroundTruthSample":
        """Create sample from dictionary, ignoring unknown keys."""
        return GroundTruthSample(
            question=data["question"],
            ground_truth_answer=data.get("ground_truth_answer"),
            category=data.get("category", "general"),
        )


@dataclass
class GroundTruthDataset:
    """Container for labeled questions with JSON persistence."""

    name: str = "ground-truth"
    description: str | None = None
    samples: list[GroundTruthSample] = field(default_factory=list)

    def add_sample(self, sample: GroundTruthSample) -> None:
        """Add a sample to dataset."""
        self.samples.append(sample)

    def get_by_category(self, category: str) -> list[GroundTruthSample]:
        """Filter by category."""
        return [s for s in self.samples if s.category == category]

    def save_json(self, path: Path | str) -> None:
        """Save dataset to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "name": self.name,
            "description": self.description,
            "samples": [s.to_dict() for s in self.samples],
        }

        with open(path, "w") as f:
            json.dump(data, f, indent=2)

        logger.info(f"Saved {len(self.samples)} samples to {path}")

    @staticmethod
    def from_json(path: Path | str) -> "GroundTruthDataset":
        """Load dataset from JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Ground truth file not found: {path}")

        with open(path) as f:
            data = json.load(f)

        dataset = GroundTruthDataset(
            name=data.get("name", path.stem),
            description=data.get("description"),
        )
        for sample_data in data.get("samples", []):
            dataset.add_sample(GroundTruthSample.from_dict(sample_data))

        logger.info(f"Loaded {len(dataset.samples)} samples from {path}")
        return dataset

    async def seed(
        self,
        session: AsyncSession,
        name: str | None = None,
        owner_id: str | None = None,
    ) -> EvaluationDatasetModel:
        """Persist the samples as an evaluation dataset and commit."""
        dataset = await evaluation_dataset_crud.create_with_questions(
            session,
            name=name or self.name,
            description=self.description,
            owner_id=owner_id,
            questions=[(s.question, s.ground_truth_answer) for s in self.samples],
        )
        await session.commit()
        logger.info(f"Seeded dataset {dataset.id} with {len(self.samples)} questions")
        return dataset

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self):
        return iter(self.samples)
