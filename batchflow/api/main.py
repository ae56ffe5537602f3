"""
FastAPI application for BatchFlow.

``app`` is built at import time; run it with ``python manage.py serve``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from batchflow import __version__
from batchflow.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from batchflow.api.middleware.error_handler import setup_exception_handlers
from batchflow.api.routes import (
    allocations_router,
    attachments_router,
    batches_router,
    health_router,
    purchase_orders_router,
    reconciliations_router,
)
from batchflow.config import configure_logging, get_logger, get_settings
from batchflow.infrastructure.storage.sqlite import close_pool, get_pool
from batchflow.infrastructure.storage.sqlite.migrations import (
    initialize_database,
    verify_schema_integrity,
)

logger = get_logger(__name__)

ROUTERS = (
    health_router,
    batches_router,
    allocations_router,
    purchase_orders_router,
    reconciliations_router,
    attachments_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Migrate, verify and open the pool on startup; close the pool on shutdown.

    A failed integrity check is logged, not fatal: the ledger stays readable
    so the drift can be inspected through the API.
    """
    settings = get_settings()
    logger.info("application_starting", environment=settings.environment, port=settings.api.port)

    try:
        await initialize_database()
        await get_pool()
    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    failed = [c for c in await verify_schema_integrity() if c["status"] != "PASS"]
    if failed:
        logger.error("startup_integrity_check_failed", checks=failed)

    logger.info("application_started")
    yield

    await close_pool()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Batch ledger, lifecycle and purchase order workflow",
        version=__version__,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Last added is outermost; the error handler wraps request logging
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    # Container liveness check
    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()
