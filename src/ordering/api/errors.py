"""Exception handlers that render every failure as ``{"message": ..., "errors": ...}``."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, InvalidOperationError, ObjectNotFoundError
from protean.exceptions import ValidationError as ProteanValidationError
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import OrderingError

logger = structlog.get_logger(__name__)


def _error(status_code: int, message: str, errors=None) -> JSONResponse:
    content = {"message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


async def _ordering_error(request: Request, exc: OrderingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message, errors=exc.errors)
    return _error(exc.status_code, exc.message, exc.errors)


async def _protean_validation_error(request: Request, exc: ProteanValidationError) -> JSONResponse:
    return _error(400, "Validation failed", exc.messages)


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return _error(404, "Resource not found", {"detail": [str(exc)]})


async def _invalid_operation(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return _error(400, str(exc))


async def _stale_state(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.info("stale_aggregate_version", path=request.url.path, error=str(exc))
    return _error(409, "The order was changed by another request; reload and try again")


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body")
        errors.setdefault(field or "body", []).append(error["msg"])
    return _error(400, "Validation failed", errors)


def register_error_handlers(app: FastAPI) -> None:
    # Protean's defaults first, then the ordering-specific response shape on top
    register_exception_handlers(app)
    app.add_exception_handler(OrderingError, _ordering_error)
    app.add_exception_handler(ProteanValidationError, _protean_validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(InvalidOperationError, _invalid_operation)
    app.add_exception_handler(ExpectedVersionError, _stale_state)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
