"""
Document API endpoints.

Routes:
    POST   /documents                  Ingest a document
    PUT    /documents/{document_id}    Replace content (re-chunk + re-embed)
    DELETE /documents/{document_id}    Delete a document and its chunks

Dependencies: fastapi, curriculum_rag.application.services
System role: Document HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from curriculum_rag.api.deps import get_document_service, get_identity
from curriculum_rag.application.services import DocumentService
from curriculum_rag.models.common import ErrorResponse
from curriculum_rag.models.document import (
    IngestDocumentRequest,
    IngestDocumentResponse,
    UpdateDocumentRequest,
    UpdateDocumentResponse,
)

router = APIRouter(
    prefix="/documents",
    tags=["documents"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)


@router.post("", response_model=IngestDocumentResponse, status_code=status.HTTP_201_CREATED)
async def ingest_document(
    request: IngestDocumentRequest,
    identity: str = Depends(get_identity),
    service: DocumentService = Depends(get_document_service),
) -> IngestDocumentResponse:
    """Chunk, embed and store a document owned by the caller (or the system)."""
    return await service.ingest(
        title=request.title,
        content=request.content,
        visibility=request.visibility,
        owner_id=identity,
    )


@router.put("/{document_id}", response_model=UpdateDocumentResponse)
async def update_document(
    document_id: UUID,
    request: UpdateDocumentRequest,
    identity: str = Depends(get_identity),
    service: DocumentService = Depends(get_document_service),
) -> UpdateDocumentResponse:
    """Replace a document's content with a new chunk generation."""
    return await service.update_content(document_id, request.content, identity)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: UUID,
    identity: str = Depends(get_identity),
    service: DocumentService = Depends(get_document_service),
) -> Response:
    """Delete a document; its chunks cascade."""
    await service.delete_document(document_id, identity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
