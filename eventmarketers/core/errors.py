"""
Domain error taxonomy and FastAPI handlers.

Services raise these; the HTTP layer renders them. Duplicate-insert conflicts
on the usage ledger and on projections never surface here: they are the
"already exists" success path.
"""
import logging
from uuid import uuid4

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import Request

logger = logging.getLogger(__name__)


class DomainError(Exception):
    code = "domain_error"
    status_code = 500

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(DomainError, ValueError):
    """Malformed input, rejected at the boundary."""

    code = "validation_error"
    status_code = 400


class NotFoundError(DomainError):
    code = "not_found"
    status_code = 404


class AuthorizationError(DomainError):
    code = "forbidden"
    status_code = 403


class StateConflictError(DomainError):
    """Illegal state transition, e.g. re-moderating a terminal item."""

    code = "state_conflict"
    status_code = 409


class TransientStorageError(DomainError):
    """Retryable connectivity/timeout fault in the relational store."""

    code = "storage_unavailable"
    status_code = 503


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid4())


def _error_payload(code: str, message: str, request_id: str) -> dict:
    return {
        "error": {"code": code, "message": message, "request_id": request_id},
        "detail": message,
    }


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    rid = _request_id(request)
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        "domain_error",
        extra={
            "request_id": rid,
            "error_code": exc.code,
            "error": exc.message,
            "status_code": exc.status_code,
            "path": request.url.path,
        },
    )
    response = JSONResponse(
        status_code=exc.status_code,
        content=_error_payload(exc.code, exc.message, rid),
    )
    response.headers["X-Request-Id"] = rid
    return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    rid = _request_id(request)
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={"request_id": rid, "error_code": "internal_error", "path": request.url.path},
    )
    response = JSONResponse(
        status_code=500,
        content=_error_payload("internal_error", "Unexpected error", rid),
    )
    response.headers["X-Request-Id"] = rid
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body/query schema failures share the ValidationError envelope."""
    rid = _request_id(request)
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query"))
    message = f"{field}: {first.get('msg', 'invalid input')}" if field else first.get("msg", "invalid input")
    logger.warning(
        "request_validation_failed",
        extra={"request_id": rid, "error_code": ValidationError.code, "error": message, "path": request.url.path},
    )
    response = JSONResponse(
        status_code=ValidationError.status_code,
        content=_error_payload(ValidationError.code, message, rid),
    )
    response.headers["X-Request-Id"] = rid
    return response
