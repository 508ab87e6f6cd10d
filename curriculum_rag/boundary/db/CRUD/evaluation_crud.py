"""
Evaluation CRUD operations.

Dependencies: sqlalchemy, curriculum_rag.boundary.db.models.evaluation_model
System role: Evaluation dataset, run and result persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from curriculum_rag.boundary.db.models.evaluation_model import (
    EvaluationDatasetModel,
    EvaluationQuestionModel,
    EvaluationResultModel,
    EvaluationRunModel,
    RunStatus,
)
from curriculum_rag.boundary.db.CRUD.base_crud import BaseCRUD


class EvaluationDatasetCRUD(BaseCRUD[EvaluationDatasetModel]):
    """CRUD operations for datasets and their questions."""

    def __init__(self) -> None:
        """Initialize EvaluationDatasetCRUD with EvaluationDatasetModel."""
        super().__init__(EvaluationDatasetModel)

    async def create_with_questions(
        self,
        session: AsyncSession,
        name: str,
        questions: list[tuple[str, str | None]],
        description: str | None = None,
        owner_id: str | None = None,
    ) -> EvaluationDatasetModel:
        """
        Create a dataset and its questions in one flush.

        Args:
            session: Async database session
            name: Dataset name
            questions: (question, ground_truth_answer) pairs in order
            description: Optional description
            owner_id: Creating identity

        Returns:
            Created dataset
        """
        dataset = await self.create(
            session,
            name=name,
            description=description,
            owner_id=owner_id,
        )
        session.add_all(
            EvaluationQuestionModel(
                dataset_id=dataset.id,
                position=position,
                question=question,
                ground_truth_answer=ground_truth,
            )
            for position, (question, ground_truth) in enumerate(questions)
        )
        await session.flush()
        return dataset

    async def get_questions(
        self,
        session: AsyncSession,
        dataset_id: UUID,
        limit: int,
    ) -> Sequence[EvaluationQuestionModel]:
        """
        Retrieve a bounded, ordered slice of a dataset's questions.

        Args:
            session: Async database session
            dataset_id: Dataset UUID
            limit: Maximum number of questions

        Returns:
            Questions ordered by position then id
        """
        stmt = (
            select(EvaluationQuestionModel)
            .where(EvaluationQuestionModel.dataset_id == dataset_id)
            .order_by(EvaluationQuestionModel.position, EvaluationQuestionModel.id)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


class EvaluationRunCRUD(BaseCRUD[EvaluationRunModel]):
    """CRUD operations for runs and their results."""

    def __init__(self) -> None:
        """Initialize EvaluationRunCRUD with EvaluationRunModel."""
        super().__init__(EvaluationRunModel)

    async def start(
        self,
        session: AsyncSession,
        dataset_id: UUID,
        requested_by: str,
    ) -> EvaluationRunModel:
        """Create a run in RUNNING state."""
        return await self.create(
            session,
            dataset_id=dataset_id,
            requested_by=requested_by,
            status=RunStatus.RUNNING,
        )

    async def finish(
        self,
        session: AsyncSession,
        id: UUID,
        status: RunStatus,
        summary: dict | None = None,
    ) -> EvaluationRunModel | None:
        """Record the terminal status and summary of a run."""
        return await self.update_by_id(session, id, status=status, summary=summary)

    async def add_result(self, session: AsyncSession, **kwargs) -> EvaluationResultModel:
        """Insert one scored question result."""
        instance = EvaluationResultModel(**kwargs)
        session.add(instance)
        await session.flush()
        return instance

    async def get_results(
        self,
        session: AsyncSession,
        run_id: UUID,
    ) -> Sequence[EvaluationResultModel]:
        """Retrieve every result row of a run."""
        stmt = select(EvaluationResultModel).where(EvaluationResultModel.run_id == run_id)
        result = await session.execute(stmt)
        return result.scalars().all()


evaluation_dataset_crud = EvaluationDatasetCRUD()
evaluation_run_crud = EvaluationRunCRUD()
