"""
Record Store Module

Whole-collection persistence for the store service. A collection is an
ordered list of JSON objects (records) kept as a single document; every
read returns the full snapshot and every write replaces it.

Backends:
    - JsonFileRecordStore: one pretty-printed JSON file per collection
    - RedisRecordStore: one JSON string value per collection
    - InMemoryRecordStore: process-local dict, used by tests

Data Format (file backend):
    data/products.json
    [
      {
        "id": 1,
        "name": "pen"
      }
    ]

Data Format (Redis):
    Key: "store:carts"
    Value: '[{"id": 1, "products": [{"id": 1, "quantity": 4}]}]'

Locking:
    ``lock(name)`` hands out one re-entrant lock per collection. Callers
    hold it across a load-mutate-save sequence so two requests cannot
    interleave on the same collection within this process. Nothing is
    coordinated across processes.

Example Usage:
    ```python
    store = JsonFileRecordStore("data", {"products": "products.json"})
    store.ensure_collection("products")

    with store.lock("products"):
        products = store.load("products")
        products.append({"id": 1, "name": "pen"})
        store.save("products", products)
    ```
"""

import copy
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

import redis

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class StorageUnavailable(Exception):
    """The persisted document could not be read, decoded or written."""

    def __init__(self, collection: str, reason: str):
        super().__init__(f"Collection '{collection}' unavailable: {reason}")
        self.collection = collection
        self.reason = reason


class RecordStore(ABC):
    """Load and save named collections as whole documents."""

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def lock(self, name: str) -> threading.RLock:
        """Return the lock guarding collection ``name``."""
        with self._locks_guard:
            if name not in self._locks:
                self._locks[name] = threading.RLock()
            return self._locks[name]

    @abstractmethod
    def load(self, name: str) -> List[Record]:
        """Return the full snapshot of collection ``name``."""

    @abstractmethod
    def save(self, name: str, records: List[Record]) -> None:
        """Replace collection ``name`` with ``records``."""

    @abstractmethod
    def ensure_collection(self, name: str) -> None:
        """Create an empty collection if none is persisted yet."""

    @staticmethod
    def _decode(name: str, raw: str) -> List[Record]:
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageUnavailable(name, f"invalid JSON ({e})") from e
        if not isinstance(records, list):
            raise StorageUnavailable(name, "document is not a JSON array")
        for position, record in enumerate(records):
            if not isinstance(record, dict):
                raise StorageUnavailable(name, f"element {position} is not a JSON object")
        return records


class JsonFileRecordStore(RecordStore):
    """Collections persisted as JSON files inside ``data_dir``."""

    def __init__(self, data_dir: str, filenames: Optional[Dict[str, str]] = None):
        super().__init__()
        self.data_dir = Path(data_dir)
        self.filenames = dict(filenames or {})

    def path_for(self, name: str) -> Path:
        """File path backing collection ``name`` (defaults to ``<name>.json``)."""
        return self.data_dir / self.filenames.get(name, f"{name}.json")

    def load(self, name: str) -> List[Record]:
        path = self.path_for(name)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageUnavailable(name, f"cannot read {path} ({e})") from e
        return self._decode(name, raw)

    def save(self, name: str, records: List[Record]) -> None:
        path = self.path_for(name)
        data = json.dumps(records, indent=2)
        try:
            # Write beside the target and swap it in so readers never see half a file
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    tmp.write(data)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageUnavailable(name, f"cannot write {path} ({e})") from e
        logger.debug(f"Saved {len(records)} records to {path}")

    def ensure_collection(self, name: str) -> None:
        path = self.path_for(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if not path.exists():
                path.write_text(json.dumps([]), encoding="utf-8")
                logger.info(f"Initialized empty collection {name} at {path}")
        except OSError as e:
            raise StorageUnavailable(name, f"cannot initialize {path} ({e})") from e


class RedisRecordStore(RecordStore):
    """Collections persisted as JSON strings in Redis."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = "store:"):
        super().__init__()
        self.redis = redis_client
        self.key_prefix = key_prefix

    def key_for(self, name: str) -> str:
        return f"{self.key_prefix}{name}"

    def load(self, name: str) -> List[Record]:
        try:
            raw = self.redis.get(self.key_for(name))
        except redis.RedisError as e:
            raise StorageUnavailable(name, f"redis read failed ({e})") from e
        if raw is None:
            raise StorageUnavailable(name, f"key {self.key_for(name)} does not exist")
        return self._decode(name, raw)

    def save(self, name: str, records: List[Record]) -> None:
        try:
            self.redis.set(self.key_for(name), json.dumps(records))
        except redis.RedisError as e:
            raise StorageUnavailable(name, f"redis write failed ({e})") from e
        logger.debug(f"Saved {len(records)} records to {self.key_for(name)}")

    def ensure_collection(self, name: str) -> None:
        try:
            # NX: only set when the key is absent
            created = self.redis.set(self.key_for(name), json.dumps([]), nx=True)
        except redis.RedisError as e:
            raise StorageUnavailable(name, f"redis init failed ({e})") from e
        if created:
            logger.info(f"Initialized empty collection {name} at {self.key_for(name)}")


class InMemoryRecordStore(RecordStore):
    """Collections held in a dict; snapshots are copied in and out."""

    def __init__(self, initial: Optional[Dict[str, List[Record]]] = None):
        super().__init__()
        self._collections: Dict[str, List[Record]] = copy.deepcopy(initial or {})

    def load(self, name: str) -> List[Record]:
        if name not in self._collections:
            raise StorageUnavailable(name, "collection does not exist")
        return copy.deepcopy(self._collections[name])

    def save(self, name: str, records: List[Record]) -> None:
        self._collections[name] = copy.deepcopy(records)

    def ensure_collection(self, name: str) -> None:
        self._collections.setdefault(name, [])
