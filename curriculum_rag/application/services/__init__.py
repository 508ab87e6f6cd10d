"""
Application services.

Exports:
  - DocumentService: Ingestion, re-chunking and deletion
  - QueryService: Search, memory-aware answers and citations
  - EvaluationService: Dataset creation and evaluation runs
"""

from curriculum_rag.application.services.document_service import DocumentService
from curriculum_rag.application.services.evaluation_service import EvaluationService
from curriculum_rag.application.services.query_service import QueryService

__all__ = ["DocumentService", "EvaluationService", "QueryService"]
