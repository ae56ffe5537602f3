"""Fixtures for API tests: the real app on a throwaway database."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from batchflow.api.main import app
from batchflow.application.services import reset_services
from batchflow.infrastructure.storage.sqlite import close_pool
from batchflow.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture
async def api_db():
    """Migrate the settings database and start from fresh service singletons."""
    await initialize_database(create_backup_before=False)
    reset_services()
    yield
    await close_pool()
    reset_services()


@pytest.fixture
async def client(api_db) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def create_batch(client: AsyncClient):
    """POST a batch and return the JSON body."""

    async def _create(**overrides) -> dict:
        payload = {
            "sku": "SKU-001",
            "product_name": "Ceramic Mug 350ml",
            "quantity": 1000,
            "unit_cost": "2.50",
        }
        payload.update(overrides)
        response = await client.post("/api/batches", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_po(client: AsyncClient):
    """POST a draft purchase order and return the JSON body."""

    async def _create(supplier_id: str = "SUP-1") -> dict:
        response = await client.post(
            "/api/purchase-orders",
            json={
                "supplier_id": supplier_id,
                "line_items": [
                    {
                        "sku": "SKU-001",
                        "product_name": "Ceramic Mug 350ml",
                        "quantity": 500,
                        "unit_cost": "2.50",
                    }
                ],
            },
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create
