"""Exception handlers mapping domain errors to HTTP responses.

Every error body is ``{"success": false, "message": ...}``; validation
failures add ``errors`` with the field → messages mapping.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import (
    DatabaseError,
    ExpectedVersionError,
    ObjectNotFoundError,
    TransactionError,
    ValidationError,
)
from protean.integrations.fastapi import register_exception_handlers

from marketplace.errors import ConflictError, MarketplaceError, UpstreamError
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def _error(status_code: int, message: str, errors: dict | None = None) -> JSONResponse:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=body)


def _first_message(messages: dict) -> str:
    for field_messages in messages.values():
        if isinstance(field_messages, (list, tuple)) and field_messages:
            return str(field_messages[0])
        if field_messages:
            return str(field_messages)
    return "Invalid request"


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    messages = getattr(exc, "messages", None) or {}
    logger.warning("Validation failed", path=request.url.path, errors=messages)
    return _error(400, _first_message(messages), messages)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.setdefault(".".join(location) or "body", []).append(error.get("msg", "Invalid value"))
    logger.warning("Request rejected", path=request.url.path, errors=errors)
    return _error(400, _first_message(errors), errors)


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    message = getattr(exc, "message", None) or "Resource not found"
    logger.warning("Not found", path=request.url.path, detail=str(exc))
    return _error(404, message)


async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message)
    else:
        logger.warning("Request refused", path=request.url.path, status=exc.status_code, error=exc.message)
    return _error(exc.status_code, exc.message)


async def version_conflict_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    conflict = ConflictError("The resource was modified concurrently, please retry")
    return await marketplace_error_handler(request, conflict)


async def persistence_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Persistence unavailable", path=request.url.path, error=str(exc), error_type=type(exc).__name__)
    return await marketplace_error_handler(request, UpstreamError("Service temporarily unavailable, please retry"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return _error(500, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's handlers, then override them with the marketplace error shape."""
    register_exception_handlers(app)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(ExpectedVersionError, version_conflict_handler)
    app.add_exception_handler(DatabaseError, persistence_error_handler)
    app.add_exception_handler(TransactionError, persistence_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
