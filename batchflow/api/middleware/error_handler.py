"""
Error handling middleware.

Standardizes all API error responses to include:
- error_code: machine-readable identifier
- message: human-readable description
- hint: suggested recovery action
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from batchflow.application.dto.responses import ErrorResponse
from batchflow.config import get_logger
from batchflow.core.exceptions import (
    BatchFlowError,
    ConfigurationError,
    InventoryRuleError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)


# Map exceptions to HTTP status codes; first match wins
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InventoryRuleError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Hint messages per error code
HINT_MAP: dict[str, str] = {
    "BATCH_NOT_FOUND": "Check the batch ID and try GET /api/batches to list batches.",
    "PURCHASE_ORDER_NOT_FOUND": (
        "Check the PO ID and try GET /api/purchase-orders to list purchase orders."
    ),
    "ALLOCATION_NOT_FOUND": "The allocation was already committed or released.",
    "RECONCILIATION_NOT_FOUND": "Check the reconciliation ID.",
    "ATTACHMENT_NOT_FOUND": "Check the attachment ID.",
    "INVALID_MOVEMENT": (
        "Use a non-zero quantity with the sign the movement type requires, "
        "drawing no more than the location holds."
    ),
    "INSUFFICIENT_AVAILABLE": (
        "Release or commit other allocations, or reserve less than the available quantity."
    ),
    "INVALID_SPLIT_QUANTITY": "Split quantity must be between 1 and the batch quantity - 1.",
    "BATCH_OVER_ALLOCATED": "Release allocations on the batch before splitting this many units.",
    "OPEN_ALLOCATIONS_BLOCK_MERGE": "Commit or release all allocations on the batches first.",
    "INVALID_MERGE": "Merge needs two or more distinct batches of one SKU at one stage.",
    "INACTIVE_BATCH": "The batch was consumed by a split or merge; use its successor.",
    "UNKNOWN_STAGE": "Use one of the pipeline stages listed in details.",
    "ILLEGAL_TRANSITION": (
        "Try GET /api/purchase-orders/{id}/transitions for the moves allowed from here."
    ),
    "BATCH_CREATION_NOT_ALLOWED": "Advance the PO to production_complete before adding batches.",
    "UNRESOLVED_DISCREPANCY": "Resolve the batch's open reconciliations first.",
    "RECONCILIATION_NOT_ALLOWED": "Move the batch to the marketplace stage before reconciling.",
    "RECONCILIATION_ALREADY_RESOLVED": "This reconciliation is closed; nothing to do.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "DATABASE_ERROR": "A database operation failed. Check server logs.",
}

# Default hints by HTTP status code
STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    404: "The requested resource was not found. Verify the ID.",
    409: "The request conflicts with the current state of the resource.",
    422: "The request could not be processed. Check the input format.",
    500: "An internal error occurred. Check server logs.",
}


def _get_hint(error_code: str, status_code: int) -> str:
    """Resolve hint from error code, falling back to status-based hint."""
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def _status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _format_details(details: dict) -> str | None:
    if not details:
        return None
    return "; ".join(f"{key}={value}" for key, value in details.items())


def _error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    detail: str | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error_code=error_code,
            message=message,
            hint=_get_hint(error_code, status_code),
            detail=detail,
            path=request.url.path,
        ).model_dump(mode="json"),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Last line of defence for exceptions no handler claimed.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                "unhandled_exception",
                request_id=getattr(request.state, "request_id", None),
                path=request.url.path,
                error_type=e.__class__.__name__,
                error=str(e),
                traceback=traceback.format_exc(),
            )
            return _error_response(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "INTERNAL_ERROR",
                "An unexpected error occurred",
            )


def setup_exception_handlers(app: FastAPI) -> None:
    """Set up FastAPI exception handlers."""

    @app.exception_handler(BatchFlowError)
    async def domain_exception_handler(request: Request, exc: BatchFlowError) -> JSONResponse:
        """Map domain errors to 404 / 409 / 422 / 500."""
        status_code = _status_for(exc)
        log = logger.error if status_code >= 500 else logger.info
        log(
            "request_rejected",
            request_id=getattr(request.state, "request_id", None),
            path=request.url.path,
            error_code=exc.code,
            status=status_code,
        )
        return _error_response(
            request, status_code, exc.code, exc.message, _format_details(exc.details)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

        return _error_response(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            "; ".join(errors),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Handle HTTP exceptions with standardized format."""
        error_code = {
            404: "NOT_FOUND",
            405: "METHOD_NOT_ALLOWED",
            400: "BAD_REQUEST",
        }.get(exc.status_code, "HTTP_ERROR")
        return _error_response(
            request, exc.status_code, error_code, str(exc.detail or "An error occurred")
        )
