"""
Retrieval and question answering API endpoints.

Routes:
    POST /rag/search                          Ranked hybrid search
    POST /rag/query                           Memory-aware grounded answer
    GET  /rag/queries/{query_id}/citations    Provenance of an answer

Dependencies: fastapi, curriculum_rag.application.services
System role: Query HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from curriculum_rag.api.deps import get_identity, get_query_service
from curriculum_rag.application.services import QueryService
from curriculum_rag.core.exceptions import CurriculumRAGException
from curriculum_rag.models.citation import Citation
from curriculum_rag.models.common import ErrorResponse
from curriculum_rag.models.query import QueryRequest, QueryResponse
from curriculum_rag.models.retrieval import SearchRequest, SearchResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/rag",
    tags=["rag"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        402: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)


@router.post("/search", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    identity: str = Depends(get_identity),
    service: QueryService = Depends(get_query_service),
) -> SearchResponse:
    """Return the chunks visible to the caller ranked against the query."""
    return await service.search(request.query, identity, limit=request.limit)


@router.post("/query", response_model=QueryResponse)
async def query(
    request: QueryRequest,
    identity: str = Depends(get_identity),
    service: QueryService = Depends(get_query_service),
) -> QueryResponse:
    """Answer a question from curriculum content and conversation memory."""
    try:
        return await service.answer(
            request.query,
            identity,
            conversation_id=request.conversation_id,
            limit=request.limit,
        )
    except CurriculumRAGException:
        raise
    except Exception as e:
        logger.exception(f"{__name__}:query - Unhandled {type(e).__name__}")
        raise CurriculumRAGException("Query processing failed") from e


@router.get("/queries/{query_id}/citations", response_model=list[Citation])
async def get_citations(
    query_id: UUID,
    identity: str = Depends(get_identity),
    service: QueryService = Depends(get_query_service),
) -> list[Citation]:
    """Citations recorded for one of the caller's queries, in rank order."""
    return await service.get_citations(query_id, identity)
