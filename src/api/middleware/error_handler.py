"""
Global error handling for the FastAPI application.

Catches VocalReviewError subclasses, request validation errors, and
unhandled exceptions, converting them into the ``{"error": ...}`` envelope
the wizard expects.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.core.exceptions import VocalReviewError

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Terjadi kesalahan pada server."
INVALID_REQUEST_MESSAGE = "Data review tidak lengkap."


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application.

    Registers three handlers in priority order:
    1. ``VocalReviewError``: 4xx keep their message, 5xx are made generic.
    2. ``RequestValidationError``: malformed multipart bodies (400).
    3. ``Exception``: catch-all for unexpected server errors (500).

    Args:
        app: The FastAPI application instance to register handlers on.
    """

    @app.exception_handler(VocalReviewError)
    async def vocal_review_error_handler(_request: Request, exc: VocalReviewError) -> JSONResponse:
        """Convert domain-specific errors into a JSON error envelope."""
        detail = exc.detail if exc.status_code < 500 else SERVER_ERROR_MESSAGE
        if exc.status_code >= 500:
            logger.error("Failed to handle review submission: [%s] %s", exc.code, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": detail, "code": exc.code},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors (malformed body/params)."""
        logger.info("Rejected malformed request: %s", exc.errors())
        return JSONResponse(
            status_code=400,
            content={"error": INVALID_REQUEST_MESSAGE, "code": "VALIDATION_ERROR"},
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler; stack traces never reach the client."""
        logger.error("Unhandled server error", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": SERVER_ERROR_MESSAGE, "code": "INTERNAL_ERROR"},
        )
