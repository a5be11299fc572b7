"""
Error taxonomy and HTTP translation.

Services raise the exceptions defined here; ``register_exception_handlers``
turns them into JSON responses of the form ``{"error": ..., "details": ...}``
(``details`` only when there is something to add).  Store-level failures
are raised by ``core.db`` as ``StoreError``/``StoreValidationError`` and
mapped by the services to the API-facing classes.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ExerciseTrackerError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(ExerciseTrackerError):
    """A required field is missing or a value is malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ExerciseTrackerError):
    """No user matches the requested identifier."""

    status_code = status.HTTP_404_NOT_FOUND


class InternalError(ExerciseTrackerError):
    """The store or something unexpected failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class StoreError(Exception):
    """Raised by the store when a read or write fails."""


class StoreValidationError(StoreError):
    """Raised by the store when a record violates a field constraint."""


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> str:
    """Flatten pydantic/FastAPI error dicts into ``"field: message"`` text."""
    parts = []
    for error in errors:
        location = ".".join(str(item) for item in error.get("loc", ()) if item not in ("query", "path", "body"))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to ``app``."""

    @app.exception_handler(ExerciseTrackerError)
    async def exercise_tracker_error_handler(request: Request, exc: ExerciseTrackerError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = ValidationError("Validation Error", details=format_validation_errors(exc.errors()))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal Server Error"},
        )
