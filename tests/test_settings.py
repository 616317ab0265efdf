import pytest

from shared.record_store import JsonFileRecordStore, RedisRecordStore
from store_service.main import Settings, build_store


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DATA_DIR", "/srv/store")
    monkeypatch.setenv("SERVICE_PORT", "9090")
    monkeypatch.setenv("STORAGE_BACKEND", "redis")

    settings = Settings()

    assert settings.data_dir == "/srv/store"
    assert settings.service_port == 9090
    assert settings.storage_backend == "redis"


def test_file_backend_uses_configured_filenames(tmp_path):
    settings = Settings(storage_backend="file", data_dir=str(tmp_path), products_file="productos.json")

    store = build_store(settings)

    assert isinstance(store, JsonFileRecordStore)
    assert store.path_for("products") == tmp_path / "productos.json"
    assert store.path_for("carts") == tmp_path / "carts.json"


def test_redis_backend_uses_key_prefix():
    settings = Settings(storage_backend="redis", redis_key_prefix="shop:")

    store = build_store(settings)

    assert isinstance(store, RedisRecordStore)
    assert store.key_for("carts") == "shop:carts"


def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError, match="Unknown storage backend"):
        build_store(Settings(storage_backend="sqlite"))
