"""Custom exception classes and error handling for the Apex Trader API."""

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..config.logging import get_logger
from ..services.trading.errors import (
    InsufficientFunds,
    InsufficientProceeds,
    InsufficientShares,
    InvalidRequest,
    PersistenceFailure,
    QuoteUnavailable,
    TradeError,
)
from .models.responses import ErrorResponse

logger = get_logger(__name__)

TRADE_ERROR_STATUS = {
    InvalidRequest: 422,
    InsufficientFunds: 409,
    InsufficientShares: 409,
    InsufficientProceeds: 409,
    QuoteUnavailable: 503,
    PersistenceFailure: 503,
}


class ApexTraderException(Exception):
    """Base exception for the Apex Trader API."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.request_id = request_id


class ValidationException(ApexTraderException):
    """Exception for validation errors."""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, str]] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            status_code=422,
            details={"field_errors": field_errors or {}},
            request_id=request_id,
        )


class NotFoundError(ApexTraderException):
    """Exception for resource not found errors."""

    def __init__(
        self, resource: str, identifier: str, request_id: Optional[str] = None
    ):
        message = f"{resource} with identifier '{identifier}' not found"
        super().__init__(
            message=message,
            status_code=404,
            details={"resource": resource, "identifier": identifier},
            request_id=request_id,
        )


class DatabaseError(ApexTraderException):
    """Exception for database operation errors."""

    def __init__(self, operation: str, message: str, request_id: Optional[str] = None):
        super().__init__(
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation},
            request_id=request_id,
        )


class ExternalServiceError(ApexTraderException):
    """Exception for external service errors."""

    def __init__(
        self,
        service: str,
        operation: str,
        message: str,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message=f"{service} service error during {operation}: {message}",
            status_code=503,
            details={"service": service, "operation": operation},
            request_id=request_id,
        )


def trade_error_status(exc: TradeError) -> int:
    """HTTP status for a trade error, 400 for unmapped subclasses."""
    for error_type, status_code in TRADE_ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 400


async def apex_trader_exception_handler(
    request: Request, exc: ApexTraderException
) -> JSONResponse:
    """Handle Apex Trader custom exceptions."""
    request_id = getattr(request.state, "request_id", None)

    logger.error(
        "Apex Trader exception occurred",
        exception_type=type(exc).__name__,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        request_id=request_id,
        path=request.url.path,
        method=request.method,
    )

    error_response = ErrorResponse(
        success=False,
        error={
            "type": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
            "status_code": exc.status_code,
        },
        request_id=request_id,
    )

    return JSONResponse(
        status_code=exc.status_code, content=error_response.model_dump()
    )


async def trade_error_handler(request: Request, exc: TradeError) -> JSONResponse:
    """Handle rejected or failed trading operations."""
    request_id = getattr(request.state, "request_id", None)
    status_code = trade_error_status(exc)

    logger.warning(
        "Trading operation rejected",
        code=exc.code,
        message=str(exc),
        retryable=exc.retryable,
        status_code=status_code,
        request_id=request_id,
        path=request.url.path,
    )

    error_response = ErrorResponse(
        success=False,
        error={
            "type": type(exc).__name__,
            "code": exc.code,
            "message": str(exc),
            "details": exc.details,
            "retryable": exc.retryable,
            "status_code": status_code,
        },
        request_id=request_id,
    )

    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(
        status_code=status_code, content=error_response.model_dump(), headers=headers
    )


async def validation_exception_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle Pydantic and request validation exceptions."""
    request_id = getattr(request.state, "request_id", None)

    # Extract field errors from Pydantic validation error
    field_errors = {}
    for error in exc.errors():
        field_path = ".".join(str(loc) for loc in error["loc"])
        field_errors[field_path] = error["msg"]

    logger.warning(
        "Validation error occurred",
        field_errors=field_errors,
        request_id=request_id,
        path=request.url.path,
        method=request.method,
    )

    error_response = ErrorResponse(
        success=False,
        error={
            "type": "ValidationError",
            "message": "Request validation failed",
            "details": {"field_errors": field_errors},
            "status_code": 422,
        },
        request_id=request_id,
    )

    return JSONResponse(status_code=422, content=error_response.model_dump())


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions."""
    request_id = getattr(request.state, "request_id", None)

    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        request_id=request_id,
        path=request.url.path,
        method=request.method,
    )

    error_response = ErrorResponse(
        success=False,
        error={
            "type": "HTTPException",
            "message": str(exc.detail),
            "status_code": exc.status_code,
        },
        request_id=request_id,
    )

    return JSONResponse(
        status_code=exc.status_code, content=error_response.model_dump()
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    request_id = getattr(request.state, "request_id", None)

    logger.error(
        "Unexpected exception occurred",
        exception_type=type(exc).__name__,
        message=str(exc),
        request_id=request_id,
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )

    # Don't expose internal error details in production
    error_response = ErrorResponse(
        success=False,
        error={
            "type": "InternalServerError",
            "message": "An unexpected error occurred",
            "status_code": 500,
        },
        request_id=request_id,
    )

    return JSONResponse(status_code=500, content=error_response.model_dump())


def setup_exception_handlers(app):
    """Register exception handlers with FastAPI app."""
    app.add_exception_handler(ApexTraderException, apex_trader_exception_handler)
    app.add_exception_handler(TradeError, trade_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Exception handlers registered")
