"""
Global error handling middleware for the FastAPI application.

Catches InterviewRecorderError subclasses, Pydantic validation errors,
plain HTTP errors and unhandled exceptions, converting them into a
consistent JSON envelope: ``{"ok": false, "detail", "code", "timestamp"}``.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from interview_recorder.core.exceptions import InterviewRecorderError
from interview_recorder.core.models import ErrorResponse

logger = logging.getLogger(__name__)


def error_envelope(detail: str, code: str, timestamp: str | None = None) -> dict:
    """Build the JSON body shared by every error response."""
    return ErrorResponse(
        detail=detail,
        code=code,
        timestamp=timestamp or datetime.now(UTC).isoformat(),
    ).model_dump()


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application.

    Registers four handlers in priority order:
    1. ``InterviewRecorderError``: maps domain errors to structured JSON responses.
    2. ``RequestValidationError``: Pydantic validation failures (422).
    3. ``HTTPException``: routing / body-parsing errors raised by Starlette.
    4. ``Exception``: catch-all for unexpected server errors (500).

    Args:
        app: The FastAPI application instance to register handlers on.
    """

    @app.exception_handler(InterviewRecorderError)
    async def domain_error_handler(_request: Request, exc: InterviewRecorderError) -> JSONResponse:
        """Convert domain-specific errors into a JSON error envelope."""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(exc.detail, exc.code, exc.timestamp),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle Pydantic request validation errors (malformed body/params)."""
        return JSONResponse(
            status_code=422,
            content=error_envelope(str(exc), "VALIDATION_ERROR"),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(str(exc.detail), f"HTTP_{exc.status_code}"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler that keeps stack traces from leaking to clients."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=error_envelope("Internal server error", "INTERNAL_ERROR"),
        )
