"""
Tests for ground truth dataset loading, saving and seeding.
"""

from pathlib import Path

import pytest

from curriculum_rag.boundary.db.CRUD.evaluation_crud import evaluation_dataset_crud
from curriculum_rag.evaluation.data.datasets import GroundTruthDataset, GroundTruthSample

PACKAGED = Path(__file__).resolve().parents[2] / "curriculum_rag" / "evaluation" / "data" / "ground_truth.json"


class TestGroundTruthDataset:
    def test_load_packaged_dataset(self) -> None:
        dataset = GroundTruthDataset.from_json(PACKAGED)

        assert dataset.name == "curriculum-basics"
        assert len(dataset) == 4
        assert len(dataset.get_by_category("rag")) == 2

    def test_save_and_reload(self, tmp_path) -> None:
        dataset = GroundTruthDataset(name="custom")
        dataset.add_sample(GroundTruthSample(question="What is a closure?", category="javascript"))
        path = tmp_path / "nested" / "custom.json"

        dataset.save_json(path)
        loaded = GroundTruthDataset.from_json(path)

        assert loaded.name == "custom"
        assert loaded.samples[0].ground_truth_answer is None
        assert loaded.samples[0].category == "javascript"

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            GroundTruthDataset.from_json(tmp_path / "absent.json")

    @pytest.mark.asyncio
    async def test_seed_preserves_order(self, test_async_db) -> None:
        dataset = GroundTruthDataset.from_json(PACKAGED)

        model = await dataset.seed(test_async_db, owner_id="instructor")

        questions = await evaluation_dataset_crud.get_questions(test_async_db, model.id, limit=10)
        assert [q.question for q in questions] == [s.question for s in dataset.samples]
        assert [q.position for q in questions] == [0, 1, 2, 3]
        assert model.name == "curriculum-basics"
