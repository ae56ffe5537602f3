"""Storage infrastructure implementations."""

from batchflow.infrastructure.storage.sqlite import (
    SQLiteUnitOfWork,
    close_pool,
    get_connection,
    get_pool,
    make_uow_factory,
)

__all__ = [
    "SQLiteUnitOfWork",
    "make_uow_factory",
    "get_pool",
    "close_pool",
    "get_connection",
]
