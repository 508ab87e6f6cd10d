"""
Evaluation service.

Creates evaluation datasets and runs the harness over them.

Dependencies: curriculum_rag.evaluation, curriculum_rag.boundary.db
System role: Evaluation orchestration layer
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.CRUD.evaluation_crud import evaluation_dataset_crud
from curriculum_rag.core.exceptions import ValidationError
from curriculum_rag.evaluation.evaluators.harness import EvaluationHarness
from curriculum_rag.evaluation.models.result_models import EvaluationReport
from curriculum_rag.models.evaluation import CreateDatasetRequest, DatasetResponse

logger = logging.getLogger(__name__)


class EvaluationService:
    """Dataset management and evaluation runs."""

    def __init__(
        self,
        db: AsyncSession,
        harness: EvaluationHarness,
        max_questions: int = 200,
    ) -> None:
        self.db = db
        self.harness = harness
        self.max_questions = max_questions

    async def create_dataset(self, request: CreateDatasetRequest, identity: str) -> DatasetResponse:
        """
        Store a labeled question set.

        Raises:
            ValidationError: If the dataset exceeds the question limit
        """
        if len(request.questions) > self.max_questions:
            raise ValidationError(
                f"Dataset exceeds {self.max_questions} questions",
                field="questions",
            )
        dataset = await evaluation_dataset_crud.create_with_questions(
            self.db,
            name=request.name,
            description=request.description,
            owner_id=identity,
            questions=[(q.question, q.ground_truth_answer) for q in request.questions],
        )
        await self.db.commit()
        logger.info(f"{__name__}:create_dataset - dataset={dataset.id} questions={len(request.questions)}")
        return DatasetResponse(
            id=dataset.id,
            name=dataset.name,
            description=dataset.description,
            question_count=len(request.questions),
        )

    async def run(self, dataset_id: UUID, identity: str) -> EvaluationReport:
        """Evaluate a dataset as identity."""
        return await self.harness.run(dataset_id, identity)
