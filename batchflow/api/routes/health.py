"""Liveness and database health endpoints."""

import time

from fastapi import APIRouter

from batchflow import __version__
from batchflow.application.dto.responses import HealthResponse, ProviderHealthResponse
from batchflow.infrastructure.storage.sqlite import get_connection, get_pool
from batchflow.infrastructure.storage.sqlite.migrations import get_current_version

router = APIRouter(prefix="/api/health", tags=["health"])

_started_at = time.monotonic()


def _uptime() -> float:
    return time.monotonic() - _started_at


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Process liveness; never touches the database."""
    return HealthResponse(status="healthy", version=__version__, uptime_seconds=_uptime())


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Database readiness.

    Reports round-trip latency and the applied schema version. A database
    with no migrations applied counts as unhealthy.
    """
    try:
        latency = await (await get_pool()).ping()
        async with get_connection() as conn:
            schema_version = await get_current_version(conn)
        database = ProviderHealthResponse(
            name="sqlite",
            available=schema_version is not None,
            latency_ms=latency,
            schema_version=schema_version,
            error=None if schema_version else "no migrations applied",
        )
    except Exception as e:
        database = ProviderHealthResponse(name="sqlite", available=False, error=str(e))

    return HealthResponse(
        status="healthy" if database.available else "unhealthy",
        version=__version__,
        uptime_seconds=_uptime(),
        database=database,
    )
