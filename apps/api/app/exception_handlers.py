"""Render typed errors as the shared JSON error envelope.

Internal details (raw gateway bodies, storage causes) are logged here and
never sent to the client.
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from flashgen_core.errors import (
    ConfigurationError,
    GatewayError,
    ParseError,
    ValidationError,
)

from app.schemas.api import ErrorBody, ErrorResponse
from app.services.errors import ErrorCode, GenerationServiceError, StorageError

logger = structlog.get_logger()


def _error_response(
    status_code: int,
    code: ErrorCode,
    message: str,
    details: Any | None = None,
    field: str | None = None,
) -> JSONResponse:
    payload = ErrorResponse(
        error=ErrorBody(code=code.value, message=message, details=details, field=field)
    )
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(mode="json", exclude_none=True),
    )


async def handle_service_error(
    request: Request, exc: GenerationServiceError
) -> JSONResponse:
    """Render orchestrator errors with their own code, status and details."""
    if isinstance(exc, StorageError):
        logger.error(
            "storage_error",
            path=request.url.path,
            operation=exc.operation,
            error=str(exc.cause or exc),
        )
    return _error_response(exc.status_code, exc.code, exc.message, exc.details)


async def handle_validation_error(
    request: Request, exc: ValidationError
) -> JSONResponse:
    return _error_response(400, ErrorCode.INVALID_INPUT, str(exc), exc.details or None)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request body validation failures as INVALID_INPUT (400)."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    return _error_response(
        400,
        ErrorCode.INVALID_INPUT,
        first.get("msg", "Invalid input"),
        field=".".join(location) or None,
    )


async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    logger.error(
        "ai_gateway_failed",
        path=request.url.path,
        status_code=exc.status_code,
        error=str(exc),
        body=exc.body,
    )
    return _error_response(
        503,
        ErrorCode.AI_SERVICE_ERROR,
        "AI service is temporarily unavailable",
    )


async def handle_parse_error(request: Request, exc: ParseError) -> JSONResponse:
    logger.error(
        "ai_response_unusable",
        path=request.url.path,
        error=str(exc),
        raw_content=exc.raw_content,
    )
    return _error_response(
        503,
        ErrorCode.AI_SERVICE_ERROR,
        "AI service failed to generate flashcards",
    )


async def handle_configuration_error(
    request: Request, exc: ConfigurationError
) -> JSONResponse:
    logger.error("ai_service_not_configured", error=str(exc))
    return _error_response(500, ErrorCode.INTERNAL_ERROR, "AI service not configured")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Render anything outside the typed taxonomy as INTERNAL_ERROR (500)."""
    logger.error(
        "unhandled_error",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return _error_response(500, ErrorCode.INTERNAL_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach every typed-error handler to the application."""
    app.add_exception_handler(GenerationServiceError, handle_service_error)
    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(GatewayError, handle_gateway_error)
    app.add_exception_handler(ParseError, handle_parse_error)
    app.add_exception_handler(ConfigurationError, handle_configuration_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
