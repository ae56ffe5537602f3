"""API middleware."""

from batchflow.api.middleware.error_handler import ErrorHandlerMiddleware
from batchflow.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
