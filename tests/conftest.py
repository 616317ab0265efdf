import pytest
from fastapi.testclient import TestClient

from shared.record_store import InMemoryRecordStore, JsonFileRecordStore
from store_service.main import Settings, create_app


@pytest.fixture
def memory_store():
    store = InMemoryRecordStore()
    store.ensure_collection("products")
    store.ensure_collection("carts")
    return store


@pytest.fixture
def file_store(tmp_path):
    return JsonFileRecordStore(str(tmp_path / "data"), {"products": "products.json", "carts": "carts.json"})


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=str(tmp_path / "data"), log_level="WARNING")


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client
