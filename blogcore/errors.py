# blogcore/errors.py
"""
Error taxonomy shared by the services and the HTTP layer.

- ValidationError: bad filter / pagination / payload. Raised before any query
  is built; the caller fixes the request.
- NotFound: a slug or id with no row. An empty list is never a NotFound.
- StoreUnavailable: the relational store failed. Surfaced as-is, never
  retried here.

Malformed pagination cursors are deliberately absent from this list: they
degrade to "no cursor" (see api/articles/cursor.py).
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    code = "GENERIC_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class StoreUnavailable(AppError):
    status_code = 503
    code = "STORE_UNAVAILABLE"


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Convert backing-store failures raised inside the block into StoreUnavailable."""
    try:
        yield
    except (SQLAlchemyError, OSError) as e:
        logger.error("store call failed during %s: %s", operation, e)
        raise StoreUnavailable(f"{operation} failed: store unavailable") from e


def format_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """pydantic error dicts -> [{"field", "message"}], dropping the non-JSON ctx."""
    return [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in errors
    ]


# ---------------------------------------------------------------------
# FastAPI handlers
# ---------------------------------------------------------------------
def _error_body(request: Request, exc: AppError) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "success": False,
        "message": exc.message,
        "code": exc.code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
    }
    if exc.details:
        body["details"] = exc.details
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=_error_body(request, exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # malformed query params and bodies share the ValidationError envelope
    error = ValidationError("invalid request", {"errors": format_errors(exc.errors())})
    return await app_error_handler(request, error)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
