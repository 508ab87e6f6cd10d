"""
Exception handlers.

Maps the domain exception hierarchy to typed {message, category}
responses so raw exceptions never reach clients.

Dependencies: fastapi, curriculum_rag.core.exceptions
System role: HTTP error translation
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from curriculum_rag.core.exceptions import CurriculumRAGException

logger = logging.getLogger(__name__)

STATUS_BY_CATEGORY = {
    "validation": status.HTTP_400_BAD_REQUEST,
    "auth": status.HTTP_401_UNAUTHORIZED,
    "budget": status.HTTP_402_PAYMENT_REQUIRED,
    "not_found": status.HTTP_404_NOT_FOUND,
    "rate_limit": status.HTTP_429_TOO_MANY_REQUESTS,
    "scoring": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "server": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "provider": status.HTTP_502_BAD_GATEWAY,
}

GENERIC_FAILURE = {"message": "Query processing failed", "category": "server"}


async def handle_domain_error(request: Request, exc: CurriculumRAGException) -> JSONResponse:
    """Render a domain exception with its category's status code."""
    status_code = STATUS_BY_CATEGORY.get(exc.category, status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.warning(
        f"{request.method} {request.url.path} - {exc.category}: {exc}",
        extra={"category": exc.category, "status_code": status_code},
    )
    headers = None
    retry_after = getattr(exc, "retry_after", None)
    if retry_after is not None:
        headers = {"Retry-After": str(max(1, round(retry_after)))}
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request body/parameter validation failures as validation errors."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": message, "category": "validation"},
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Hide unexpected failures behind a generic server error."""
    logger.exception(f"{request.method} {request.url.path} - Unhandled {type(exc).__name__}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=GENERIC_FAILURE)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to app."""
    app.add_exception_handler(CurriculumRAGException, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected_error)
