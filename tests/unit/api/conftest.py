"""API test fixtures: the real app wired to a CSV-seeded in-memory store."""

import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from swiftroute.adapters.csv_loader.seeder import seed_from_csv
from swiftroute.config import Settings
from swiftroute.infrastructure.api.dependencies import Storage, get_settings, get_storage
from swiftroute.main import create_app

DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@pytest.fixture
def api_store(store):
    demo = Storage.in_memory(store)
    asyncio.run(seed_from_csv(DATA_DIR, demo.partners, demo.orders))
    store.commit()
    return store


@pytest.fixture
def client(api_store):
    app = create_app()
    test_settings = Settings(SUGGESTER_BACKEND="rules", STORAGE_BACKEND="memory")

    async def _storage():
        yield Storage.in_memory(api_store)

    app.dependency_overrides[get_storage] = _storage
    app.dependency_overrides[get_settings] = lambda: test_settings
    return TestClient(app)


@pytest.fixture
def partner_ids(client):
    """Partner name → generated id."""
    return {p["name"]: p["id"] for p in client.get("/api/partners").json()}
