"""ORM models."""

from curriculum_rag.boundary.db.models.budget_model import UserBudgetModel
from curriculum_rag.boundary.db.models.chunk_model import ChunkModel
from curriculum_rag.boundary.db.models.conversation_model import (
    ConversationTurnModel,
    TurnRole,
)
from curriculum_rag.boundary.db.models.document_model import DocumentModel, Visibility
from curriculum_rag.boundary.db.models.evaluation_model import (
    EvaluationDatasetModel,
    EvaluationQuestionModel,
    EvaluationResultModel,
    EvaluationRunModel,
    RunStatus,
)
from curriculum_rag.boundary.db.models.query_model import CitationModel, QueryLogModel

__all__ = [
    "ChunkModel",
    "CitationModel",
    "ConversationTurnModel",
    "DocumentModel",
    "EvaluationDatasetModel",
    "EvaluationQuestionModel",
    "EvaluationResultModel",
    "EvaluationRunModel",
    "QueryLogModel",
    "RunStatus",
    "TurnRole",
    "UserBudgetModel",
    "Visibility",
]
