"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from curriculum_rag.boundary.db.CRUD import document_crud, chunk_crud

    document = await document_crud.get_by_id(db, document_id)
"""

from curriculum_rag.boundary.db.CRUD.base_crud import BaseCRUD
from curriculum_rag.boundary.db.CRUD.budget_crud import BudgetCRUD, budget_crud
from curriculum_rag.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from curriculum_rag.boundary.db.CRUD.conversation_crud import (
    ConversationCRUD,
    conversation_crud,
)
from curriculum_rag.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from curriculum_rag.boundary.db.CRUD.evaluation_crud import (
    EvaluationDatasetCRUD,
    EvaluationRunCRUD,
    evaluation_dataset_crud,
    evaluation_run_crud,
)
from curriculum_rag.boundary.db.CRUD.query_crud import (
    CitationCRUD,
    QueryLogCRUD,
    citation_crud,
    query_log_crud,
)

__all__ = [
    "BaseCRUD",
    "BudgetCRUD",
    "budget_crud",
    "ChunkCRUD",
    "chunk_crud",
    "CitationCRUD",
    "citation_crud",
    "ConversationCRUD",
    "conversation_crud",
    "DocumentCRUD",
    "document_crud",
    "EvaluationDatasetCRUD",
    "evaluation_dataset_crud",
    "EvaluationRunCRUD",
    "evaluation_run_crud",
    "QueryLogCRUD",
    "query_log_crud",
]
