"""
FastAPI exception handlers for structured error responses.

Completion failures keep the shape of a normal completion response
({"suggestions": [], "status": ..., "error": ...}) so the client can render
the message without special-casing HTTP errors.
"""

from datetime import datetime, timezone

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from inline_completion.api.models import CompletionResponsePayload
from inline_completion.llm.exceptions import CompletionError
from inline_completion.models.enums import CompletionStatus

logger = structlog.get_logger(__name__)

# 499: client closed request (nginx convention)
HTTP_CLIENT_CLOSED_REQUEST = 499

STATUS_CODES = {
    CompletionStatus.NEEDS_DOWNLOAD: status.HTTP_503_SERVICE_UNAVAILABLE,
    CompletionStatus.DOWNLOADING: status.HTTP_503_SERVICE_UNAVAILABLE,
    CompletionStatus.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    CompletionStatus.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    CompletionStatus.ABORTED: HTTP_CLIENT_CLOSED_REQUEST,
    CompletionStatus.PROVIDER_ERROR: status.HTTP_502_BAD_GATEWAY,
}

# Expected while the user types or while a model downloads
QUIET_STATUSES = frozenset({
    CompletionStatus.TIMEOUT,
    CompletionStatus.DOWNLOADING,
    CompletionStatus.ABORTED,
})


async def completion_error_handler(request: Request, exc: CompletionError) -> JSONResponse:
    """
    Handle completion taxonomy errors.
    
    Maps availability to 503, timeout to 504, external abort to 499 and
    other provider failures to 502. Timeouts carry no user message.
    
    Args:
        request: FastAPI request
        exc: CompletionError instance
    
    Returns:
        JSON completion response with empty suggestions
    """
    log = logger.debug if exc.status in QUIET_STATUSES else logger.warning
    log(
        "Completion failed",
        status=exc.status.value,
        error_type=type(exc).__name__,
        error=exc.message,
        path=request.url.path,
    )
    
    payload = CompletionResponsePayload(
        suggestions=[],
        status=exc.status,
        error=None if exc.status is CompletionStatus.TIMEOUT else exc.message,
    )
    return JSONResponse(
        status_code=STATUS_CODES.get(exc.status, status.HTTP_502_BAD_GATEWAY),
        content=payload.model_dump(mode="json", exclude_none=True),
    )


async def pydantic_validation_error_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors raised outside request parsing.
    
    Maps to 400 Bad Request (client error).
    """
    logger.warning("Invalid request format", errors=exc.errors())
    
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "invalid_request",
            "message": "Request validation failed",
            "details": exc.errors(include_url=False, include_context=False),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.
    
    Maps to 500 Internal Server Error.
    """
    logger.exception("Unexpected error", error_type=type(exc).__name__)
    
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    CompletionError: completion_error_handler,
    PydanticValidationError: pydantic_validation_error_handler,
    Exception: generic_error_handler,
}
