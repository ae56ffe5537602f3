"""
BatchFlow settings.

Every group reads its own environment prefix (``STORAGE_DB_NAME``,
``INVENTORY_DEFAULT_LOCATION_ID``, ``API_PORT``, ...); top-level values and
a ``.env`` file are read by :class:`Settings`.
"""

import re
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PREFIX_RE = re.compile(r"^[A-Z][A-Z0-9]{0,7}$")


class StorageSettings(BaseSettings):
    """SQLite location, pool sizing and write-lock behaviour."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "batchflow.db"

    pool_size: int = Field(default=5, ge=1, le=64)
    busy_timeout: int = Field(default=30000, ge=0, description="Milliseconds")

    # BEGIN IMMEDIATE retries when another writer holds the database
    lock_retry_attempts: int = Field(default=3, ge=1)
    lock_retry_delay: float = Field(default=0.05, gt=0, description="Seconds, doubled per attempt")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class InventorySettings(BaseSettings):
    """Ledger and numbering defaults."""

    model_config = SettingsConfigDict(env_prefix="INVENTORY_")

    # Credited by receipts and used as the draw fallback when a batch has no located stock
    default_location_id: str = Field(default="factory", min_length=1)
    batch_number_prefix: str = "B"
    po_number_prefix: str = "PO"

    @field_validator("batch_number_prefix", "po_number_prefix")
    @classmethod
    def check_prefix(cls, v: str) -> str:
        v = v.strip().upper()
        if not _PREFIX_RE.match(v):
            raise ValueError("number prefix must be 1-8 uppercase letters or digits")
        return v


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "BatchFlow"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    inventory: InventorySettings = Field(default_factory=InventorySettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        storage = StorageSettings(**v) if isinstance(v, dict) else (v or StorageSettings())
        storage.data_dir.mkdir(parents=True, exist_ok=True)
        return storage


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
