"""
Exception taxonomy of the warehouse service and the FastAPI handlers that
render it.

Every error response has the shape ``{"error": str, "details": dict, "path": str}``.
"""
from typing import Any, Optional, Union
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from .logging_config import get_logger

logger = get_logger("error_handlers")


class AppException(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int = None, details: dict = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(AppException):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, identifier: Union[int, str]):
        super().__init__(
            f"{resource} '{identifier}' not found",
            details={"resource": resource, "identifier": str(identifier)}
        )


class DuplicateResourceError(AppException):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            f"{resource} with {field} '{value}' already exists",
            details={"resource": resource, "field": field, "value": value}
        )


class ValidationError(AppException):
    """Input that passed schema validation but is still unacceptable."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str, errors: list = None):
        super().__init__(message, details={"validation_errors": errors or []})


class ImageRejectedError(ValidationError):
    """Uploaded image too large, of a disallowed type, or not an image at all."""


class InsufficientStockError(AppException):
    """Outbound quantity exceeds what is on hand. Nothing has been written."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, item_id: str, available: float, requested: float):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock! Available: {available}",
            details={"item_id": item_id, "available": available, "requested": requested}
        )


class InvalidStateError(AppException):
    """The resource exists but its state forbids the operation."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, resource: str, identifier: Union[int, str], state: str, message: str = None):
        super().__init__(
            message or f"{resource} '{identifier}' is {state}",
            details={"resource": resource, "identifier": str(identifier), "state": state}
        )


class PermissionDeniedError(AppException):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, module: str, action: str):
        super().__init__(
            f"Not allowed to {action} {module}",
            details={"module": module, "action": action}
        )


class PersistenceError(AppException):
    """A read or write against the database failed."""

    def __init__(self, operation: str, table: str, original_error: str = None):
        self.operation = operation
        self.table = table
        super().__init__(
            f"Failed to {operation} {table}",
            details={"operation": operation, "table": table, "original_error": original_error}
        )


class StorageError(AppException):
    """The object store could not write an object."""

    def __init__(self, message: str, original_error: str = None):
        super().__init__(
            f"Failed to upload image: {message}",
            details={"original_error": original_error}
        )


def _error_response(request: Request, status_code: int, error: str, details: Optional[dict[str, Any]] = None):
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "details": details or {}, "path": request.url.path}
    )


async def app_exception_handler(request: Request, exc: AppException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message} {exc.details}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.message}")
    return _error_response(request, exc.status_code, exc.message, exc.details)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Invalid request on {request.method} {request.url.path}: {len(errors)} error(s)")
    return _error_response(
        request, status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation failed", {"validation_errors": errors}
    )


async def value_error_handler(request: Request, exc: ValueError):
    """Argument errors raised by the service layer."""
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return _error_response(request, status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    """Database errors that escaped the persistence gateway."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=True)

    if isinstance(exc, IntegrityError):
        return _error_response(request, status.HTTP_409_CONFLICT, "Data integrity constraint violated")
    return _error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error occurred",
        {"exception_type": type(exc).__name__}
    )


async def generic_exception_handler(request: Request, exc: Exception):
    logger.critical(f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}: {exc}", exc_info=True)
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
