"""
SQLite unit of work.

Binds every store to one pooled connection and one transaction. Writers
open with BEGIN IMMEDIATE so the check-then-act inside a service runs
against the latest committed state with no other writer interleaving.
"""

import sqlite3
from contextlib import AsyncExitStack

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from batchflow.config import get_logger, get_settings
from batchflow.core.exceptions import DatabaseError
from batchflow.core.interfaces import IUnitOfWork
from batchflow.infrastructure.storage.sqlite.allocation_store import SQLiteAllocationStore
from batchflow.infrastructure.storage.sqlite.attachment_store import SQLiteAttachmentStore
from batchflow.infrastructure.storage.sqlite.batch_store import SQLiteBatchStore
from batchflow.infrastructure.storage.sqlite.connection import ConnectionPool, get_pool
from batchflow.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore
from batchflow.infrastructure.storage.sqlite.purchase_order_store import (
    SQLitePurchaseOrderStore,
)
from batchflow.infrastructure.storage.sqlite.reconciliation_store import (
    SQLiteReconciliationStore,
)

logger = get_logger(__name__)


def _is_locked(exc: BaseException) -> bool:
    """Only a busy write lock is worth retrying."""
    return isinstance(exc, sqlite3.OperationalError) and "locked" in str(exc).lower()


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "write_lock_retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


class SQLiteUnitOfWork(IUnitOfWork):
    """One transaction on one pooled connection."""

    def __init__(
        self,
        pool: ConnectionPool | None = None,
        write: bool = True,
        retry_attempts: int | None = None,
        retry_delay: float | None = None,
    ):
        settings = get_settings()
        self._pool = pool
        self._write = write
        self._retry_attempts = retry_attempts or settings.storage.lock_retry_attempts
        self._retry_delay = retry_delay or settings.storage.lock_retry_delay
        self._stack: AsyncExitStack | None = None

    async def __aenter__(self) -> "SQLiteUnitOfWork":
        pool = self._pool or await get_pool()
        self._stack = AsyncExitStack()
        conn = await self._stack.enter_async_context(pool.acquire())
        try:
            await self._begin(conn)
        except BaseException:
            await self._stack.aclose()
            raise

        self._conn = conn
        self.batches = SQLiteBatchStore(conn)
        self.ledger = SQLiteLedgerStore(conn)
        self.allocations = SQLiteAllocationStore(conn)
        self.purchase_orders = SQLitePurchaseOrderStore(conn)
        self.reconciliations = SQLiteReconciliationStore(conn)
        self.attachments = SQLiteAttachmentStore(conn)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                await self._commit()
            else:
                await self._rollback()
                logger.debug("transaction_rolled_back", error_type=exc_type.__name__)
                if isinstance(exc, sqlite3.Error):
                    raise DatabaseError("transaction", str(exc)) from exc
        finally:
            await self._stack.aclose()

    async def _begin(self, conn) -> None:
        statement = "BEGIN IMMEDIATE" if self._write else "BEGIN"
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retry_attempts),
                wait=wait_exponential(multiplier=self._retry_delay, max=self._retry_delay * 8),
                retry=retry_if_exception(_is_locked),
                before_sleep=_log_retry,
                reraise=True,
            ):
                with attempt:
                    await conn.execute(statement)
        except sqlite3.Error as e:
            raise DatabaseError("begin transaction", str(e)) from e

    async def _commit(self) -> None:
        try:
            await self._conn.execute("COMMIT")
        except sqlite3.Error as e:
            await self._rollback()
            raise DatabaseError("commit", str(e)) from e

    async def _rollback(self) -> None:
        # Some failures already ended the transaction inside SQLite
        if self._conn.in_transaction:
            await self._conn.execute("ROLLBACK")


def make_uow_factory(pool: ConnectionPool | None = None):
    """Factory bound to a pool (the global pool when None)."""

    def factory(write: bool = True) -> SQLiteUnitOfWork:
        return SQLiteUnitOfWork(pool=pool, write=write)

    return factory
