"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import aiosqlite
import pytest


@pytest.fixture
async def raw_conn(migrated_db: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """Plain connection to a migrated database, bypassing the unit of work."""
    async with aiosqlite.connect(migrated_db) as conn:
        await conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = aiosqlite.Row
        yield conn
