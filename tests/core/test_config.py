"""Tests for settings and logging configuration."""

import json
from decimal import Decimal

import pytest
import structlog
from pydantic import ValidationError

from batchflow.config import get_settings, reset_settings
from batchflow.config.logging import (
    add_app_context,
    build_processors,
    configure_logging,
    render_domain_values,
)
from batchflow.config.settings import InventorySettings, StorageSettings
from batchflow.core.entities import BatchStage


class TestSettings:
    def test_defaults(self):
        settings = get_settings()
        assert settings.app_name == "BatchFlow"
        assert settings.inventory.default_location_id == "factory"
        assert settings.inventory.batch_number_prefix == "B"
        assert settings.inventory.po_number_prefix == "PO"

    def test_db_path_under_data_dir(self):
        storage = get_settings().storage
        assert storage.db_path == storage.data_dir / "batchflow.db"
        assert storage.data_dir.exists()

    def test_env_prefixes(self, monkeypatch):
        monkeypatch.setenv("INVENTORY_DEFAULT_LOCATION_ID", "hub-dxb")
        monkeypatch.setenv("STORAGE_POOL_SIZE", "2")
        reset_settings()

        settings = get_settings()
        assert settings.inventory.default_location_id == "hub-dxb"
        assert settings.storage.pool_size == 2

    def test_prefix_is_uppercased(self):
        assert InventorySettings(po_number_prefix=" po ").po_number_prefix == "PO"

    @pytest.mark.parametrize("prefix", ["", "B-1", "TOOLONGPREFIX"])
    def test_bad_prefix_rejected(self, prefix):
        with pytest.raises(ValidationError):
            InventorySettings(batch_number_prefix=prefix)

    def test_pool_size_must_be_positive(self, tmp_path):
        with pytest.raises(ValidationError):
            StorageSettings(data_dir=tmp_path, pool_size=0)


class TestLogging:
    def test_domain_values_flattened(self):
        event = render_domain_values(
            None, "info", {"total_cost": Decimal("1500.00"), "stage": BatchStage.WAREHOUSE, "qty": 3}
        )
        assert event == {"total_cost": "1500.00", "stage": "warehouse", "qty": 3}

    def test_app_context_does_not_override(self):
        event = add_app_context(None, "info", {"environment": "custom"})
        assert event["app"] == "BatchFlow"
        assert event["environment"] == "custom"

    def test_json_renderer_selected(self):
        processors = build_processors(json_output=True)
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer_selected(self):
        processors = build_processors(json_output=False)
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_json_output_is_serializable(self):
        renderer = build_processors(json_output=True)[-1]
        event = render_domain_values(None, "info", {"event": "split_complete", "cost": Decimal("0.33")})
        assert json.loads(renderer(None, "info", event))["cost"] == "0.33"

    def test_configure_logging_runs(self):
        try:
            configure_logging(json_output=True)
            configure_logging()
        finally:
            structlog.reset_defaults()
