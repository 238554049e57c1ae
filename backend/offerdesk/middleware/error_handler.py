"""
Global error handling middleware.

WHAT: Translate exceptions to appropriate HTTP responses
WHY: Consistent error responses with proper status codes
HOW: FastAPI exception handlers for custom exceptions
"""

from datetime import datetime

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..clients.types import (
    RequestStoreError,
    RequestStoreTimeoutError,
    RequestStoreUnavailableError,
)
from ..utils.exceptions import (
    BusinessException,
    ViewNotFoundException,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


async def request_store_error_handler(request: Request, exc: RequestStoreError):
    """
    Handle RequestStoreError that escaped the controller.

    WHAT: Warehouse API failure outside a page workflow
    WHY: Timeouts and refused connections are the upstream's fault
    HOW: 503 for transport failures, 502 for everything else
    """
    if isinstance(exc, (RequestStoreTimeoutError, RequestStoreUnavailableError)):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        code = "REQUEST_STORE_UNAVAILABLE"
    else:
        status_code = status.HTTP_502_BAD_GATEWAY
        code = "REQUEST_STORE_BAD_GATEWAY"

    logger.error(f"Request Store error: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={
            "error": code,
            "message": exc.message,
            "timestamp": datetime.now().isoformat()
        }
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Handle FastAPI RequestValidationError.

    WHAT: Request validation failed
    WHY: Invalid request payload
    HOW: Return 400 with field errors
    """
    logger.warning(f"Validation error: {exc.errors()}")

    # Keep error details JSON serializable
    cleaned_errors = []
    for error in exc.errors():
        cleaned_error = {
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": error.get("input")
        }
        if "ctx" in error:
            cleaned_error["ctx"] = {
                k: str(v) if isinstance(v, Exception) else v
                for k, v in error["ctx"].items()
            }
        cleaned_errors.append(cleaned_error)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": cleaned_errors,
            "timestamp": datetime.now().isoformat()
        }
    )


async def business_exception_handler(request: Request, exc: BusinessException):
    """
    Handle BusinessException.

    WHAT: Domain-specific error
    WHY: Map error codes to HTTP semantics
    HOW: 404 for views that are not open, 400 otherwise
    """
    status_code = status.HTTP_400_BAD_REQUEST
    if isinstance(exc, ViewNotFoundException):
        status_code = status.HTTP_404_NOT_FOUND

    logger.warning(f"API exception: {exc.code} - {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.code,
            "message": exc.message,
            "details": exc.details,
            "timestamp": datetime.now().isoformat()
        }
    )


def register_exception_handlers(app):
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(RequestStoreError, request_store_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(BusinessException, business_exception_handler)

    logger.info("Exception handlers registered")
