"""
Evaluation API schemas.

Dependencies: pydantic
System role: Evaluation API contracts
"""

import uuid

from pydantic import BaseModel, Field


class DatasetQuestionInput(BaseModel):
    """One labeled question supplied when creating a dataset."""

    question: str = Field(min_length=1)
    ground_truth_answer: str | None = None


class CreateDatasetRequest(BaseModel):
    """Request schema for creating an evaluation dataset."""

    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    questions: list[DatasetQuestionInput] = Field(min_length=1)


class DatasetResponse(BaseModel):
    """Response schema for a created dataset."""

    id: uuid.UUID
    name: str
    description: str | None = None
    question_count: int


class RunEvaluationRequest(BaseModel):
    """Request schema for evaluating a dataset."""

    dataset_id: uuid.UUID


class MetricsResponse(BaseModel):
    """Judge scores for one answer."""

    faithfulness: float
    relevance: float
    coverage: float
    overall: float


class RetrievedChunkRef(BaseModel):
    """Chunk used for an evaluated answer."""

    chunk_id: uuid.UUID
    relevance: float


class QuestionResultResponse(BaseModel):
    """Scored outcome of one question."""

    question_id: uuid.UUID
    question: str
    generated_answer: str
    retrieved_chunks: list[RetrievedChunkRef]
    metrics: MetricsResponse
    passed: bool


class EvaluationErrorResponse(BaseModel):
    """Question that failed to evaluate."""

    question: str
    error: str


class EvaluationSummaryResponse(BaseModel):
    """Run aggregate over scored questions."""

    total_questions: int
    passed: int
    failed: int
    errors: int
    pass_rate: float
    avg_faithfulness: float
    avg_relevance: float
    avg_coverage: float
    avg_overall: float


class EvaluationReportResponse(BaseModel):
    """Response schema for an evaluation run."""

    run_id: uuid.UUID
    results: list[QuestionResultResponse]
    errors: list[EvaluationErrorResponse]
    summary: EvaluationSummaryResponse
