"""Schema migrations and integrity verification for the BatchFlow database."""

from batchflow.infrastructure.storage.sqlite.migrations.migrator import (
    IMMUTABILITY_TRIGGERS,
    REQUIRED_TABLES,
    MigrationInfo,
    MigrationResult,
    create_backup,
    discover_migrations,
    get_applied_migrations,
    get_current_version,
    get_migration_status,
    initialize_database,
    restore_backup,
    verify_schema_integrity,
)

__all__ = [
    "REQUIRED_TABLES",
    "IMMUTABILITY_TRIGGERS",
    "MigrationInfo",
    "MigrationResult",
    "discover_migrations",
    "get_applied_migrations",
    "get_current_version",
    "get_migration_status",
    "initialize_database",
    "verify_schema_integrity",
    "create_backup",
    "restore_backup",
]
