"""Global exception handlers — translate domain errors to HTTP responses.

Each domain exception maps to a specific HTTP status code and the
standard ``{"status": <code>, "message": "..."}`` envelope.  Only a missing
owner or repository is the caller's problem (404); every other upstream
failure is reported as 503.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Mapping

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from repo_aggregator.domain.exceptions import (
    RepoAggregatorError,
    ResourceNotFoundError,
    UpstreamUnavailableError,
)
from repo_aggregator.interface.schemas import ErrorResponse

logger = logging.getLogger(__name__)

# Subclasses resolve to their nearest listed ancestor.
_EXCEPTION_STATUS: list[tuple[type[RepoAggregatorError], int]] = [
    (ResourceNotFoundError, 404),
    (UpstreamUnavailableError, 503),
]


def _error_json(
    status_code: int, message: str, headers: Mapping[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(status=status_code, message=message).model_dump(),
        headers=headers,
    )


def _domain_handler(
    status_code: int,
) -> Callable[[Request, Exception], Awaitable[JSONResponse]]:
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        return _error_json(status_code, str(exc))

    return handler


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application."""

    # ── Domain exceptions ───────────────────────────────────────────────

    for exc_type, code in _EXCEPTION_STATUS:
        app.add_exception_handler(exc_type, _domain_handler(code))

    # ── Transport-level errors (unknown route, 405, 406, …) ─────────────

    @app.exception_handler(StarletteHTTPException)
    async def http_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_json(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    # ── Catch-all for unexpected errors ─────────────────────────────────

    @app.exception_handler(Exception)
    async def generic_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception")
        return _error_json(500, "An unexpected error occurred. Please try again later.")
