import json
from unittest.mock import MagicMock

import pytest
import redis

from shared.record_store import InMemoryRecordStore, RedisRecordStore, StorageUnavailable


class TestJsonFileRecordStore:
    def test_ensure_collection_creates_empty_document(self, file_store):
        file_store.ensure_collection("products")

        path = file_store.path_for("products")
        assert path.exists()
        assert json.loads(path.read_text()) == []
        assert file_store.load("products") == []

    def test_ensure_collection_keeps_existing_content(self, file_store):
        file_store.ensure_collection("products")
        file_store.save("products", [{"id": 1, "name": "pen"}])

        file_store.ensure_collection("products")

        assert file_store.load("products") == [{"id": 1, "name": "pen"}]

    def test_save_replaces_whole_document(self, file_store):
        file_store.ensure_collection("carts")
        file_store.save("carts", [{"id": 1, "products": []}, {"id": 2, "products": []}])
        file_store.save("carts", [{"id": 2, "products": []}])

        assert file_store.load("carts") == [{"id": 2, "products": []}]

    def test_save_writes_indented_json_and_leaves_no_temp_files(self, file_store):
        file_store.ensure_collection("products")
        file_store.save("products", [{"id": 1}])

        path = file_store.path_for("products")
        assert path.read_text() == json.dumps([{"id": 1}], indent=2)
        assert sorted(p.name for p in path.parent.iterdir()) == ["products.json"]

    def test_unknown_collection_defaults_to_name_json(self, file_store):
        assert file_store.path_for("orders").name == "orders.json"

    def test_missing_document_is_unavailable(self, file_store):
        with pytest.raises(StorageUnavailable) as exc_info:
            file_store.load("products")
        assert exc_info.value.collection == "products"

    def test_corrupt_document_is_unavailable(self, file_store):
        file_store.ensure_collection("products")
        file_store.path_for("products").write_text("[{not json")

        with pytest.raises(StorageUnavailable):
            file_store.load("products")

    def test_non_array_document_is_unavailable(self, file_store):
        file_store.ensure_collection("products")
        file_store.path_for("products").write_text('{"id": 1}')

        with pytest.raises(StorageUnavailable, match="not a JSON array"):
            file_store.load("products")

    def test_non_object_element_is_unavailable(self, file_store):
        file_store.ensure_collection("products")
        file_store.path_for("products").write_text('[{"id": 1}, "pen"]')

        with pytest.raises(StorageUnavailable, match="element 1 is not a JSON object"):
            file_store.load("products")

    def test_lock_is_per_collection(self, file_store):
        assert file_store.lock("products") is file_store.lock("products")
        assert file_store.lock("products") is not file_store.lock("carts")


class TestInMemoryRecordStore:
    def test_snapshots_are_copies(self):
        store = InMemoryRecordStore({"products": [{"id": 1, "tags": ["a"]}]})

        snapshot = store.load("products")
        snapshot[0]["tags"].append("b")
        snapshot.append({"id": 2})

        assert store.load("products") == [{"id": 1, "tags": ["a"]}]

    def test_unknown_collection_is_unavailable(self):
        with pytest.raises(StorageUnavailable):
            InMemoryRecordStore().load("carts")


class TestRedisRecordStore:
    def test_load_decodes_stored_json(self):
        client = MagicMock()
        client.get.return_value = '[{"id": 1, "products": []}]'
        store = RedisRecordStore(client, key_prefix="test:")

        assert store.load("carts") == [{"id": 1, "products": []}]
        client.get.assert_called_once_with("test:carts")

    def test_save_sets_whole_document(self):
        client = MagicMock()
        store = RedisRecordStore(client)

        store.save("products", [{"id": 1}])

        client.set.assert_called_once_with("store:products", json.dumps([{"id": 1}]))

    def test_ensure_collection_only_sets_missing_key(self):
        client = MagicMock()
        store = RedisRecordStore(client)

        store.ensure_collection("carts")

        client.set.assert_called_once_with("store:carts", "[]", nx=True)

    def test_missing_key_is_unavailable(self):
        client = MagicMock()
        client.get.return_value = None

        with pytest.raises(StorageUnavailable):
            RedisRecordStore(client).load("carts")

    def test_redis_errors_become_unavailable(self):
        client = MagicMock()
        client.get.side_effect = redis.ConnectionError("connection refused")
        client.set.side_effect = redis.ConnectionError("connection refused")
        store = RedisRecordStore(client)

        with pytest.raises(StorageUnavailable):
            store.load("products")
        with pytest.raises(StorageUnavailable):
            store.save("products", [])

    def test_non_object_element_in_redis_is_unavailable(self):
        client = MagicMock()
        client.get.return_value = "[1, 2]"

        with pytest.raises(StorageUnavailable, match="element 0"):
            RedisRecordStore(client).load("products")
