"""
Evaluation API endpoints.

Routes:
    POST /evaluations/datasets    Create a labeled question set
    POST /evaluations             Evaluate a dataset

Dependencies: fastapi, curriculum_rag.application.services
System role: Evaluation HTTP API
"""

from fastapi import APIRouter, Depends, status

from curriculum_rag.api.deps import get_evaluation_service, get_identity
from curriculum_rag.application.services import EvaluationService
from curriculum_rag.models.common import ErrorResponse
from curriculum_rag.models.evaluation import (
    CreateDatasetRequest,
    DatasetResponse,
    EvaluationReportResponse,
    RunEvaluationRequest,
)

router = APIRouter(
    prefix="/evaluations",
    tags=["evaluations"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)


@router.post("/datasets", response_model=DatasetResponse, status_code=status.HTTP_201_CREATED)
async def create_dataset(
    request: CreateDatasetRequest,
    identity: str = Depends(get_identity),
    service: EvaluationService = Depends(get_evaluation_service),
) -> DatasetResponse:
    """Store an evaluation dataset owned by the caller."""
    return await service.create_dataset(request, identity)


@router.post("", response_model=EvaluationReportResponse)
async def run_evaluation(
    request: RunEvaluationRequest,
    identity: str = Depends(get_identity),
    service: EvaluationService = Depends(get_evaluation_service),
) -> EvaluationReportResponse:
    """Evaluate every question of a dataset and return the report."""
    report = await service.run(request.dataset_id, identity)
    return EvaluationReportResponse.model_validate(report.to_dict())
