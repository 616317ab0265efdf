import logging
from typing import Any, Dict, List, Optional

from shared.record_store import Record, RecordStore

logger = logging.getLogger(__name__)


class NotFound(Exception):
    """No record with the requested id exists in the collection."""

    message = "Not found"

    def __init__(self, record_id: Any):
        super().__init__(f"{self.message}: {record_id}")
        self.record_id = record_id


class ProductNotFound(NotFound):
    message = "Product not found"


class CartNotFound(NotFound):
    message = "Cart not found"


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def same_id(record: Record, record_id: Any) -> bool:
    """Loose id equality: "3" matches 3 and 3.0, two strings compare as text."""
    stored = record.get("id")
    if isinstance(stored, str) and isinstance(record_id, str):
        return stored == record_id
    number = _as_number(stored)
    return number is not None and number == _as_number(record_id)


def find_index(records: List[Record], record_id: Any) -> Optional[int]:
    """Position of the first record whose id matches, or None."""
    for index, record in enumerate(records):
        if same_id(record, record_id):
            return index
    return None


def next_id(records: List[Record]) -> int:
    """Highest integer id in the snapshot plus one, 1 for an empty collection."""
    ids = [
        record["id"] for record in records
        if isinstance(record.get("id"), int) and not isinstance(record["id"], bool)
    ]
    return max(ids) + 1 if ids else 1


class BaseRepository:
    """Load-mutate-save over one named collection of a RecordStore."""

    collection: str = ""

    def __init__(self, store: RecordStore):
        """Initialize with the record store holding the collection."""
        self.store = store

    def _snapshot(self) -> List[Record]:
        return self.store.load(self.collection)

    def _persist(self, records: List[Record]) -> None:
        self.store.save(self.collection, records)

    def _locked(self):
        return self.store.lock(self.collection)

    def _log_missing(self, kind: str, record_id: Any) -> None:
        logger.warning(f"{kind} {record_id} not found", extra={"collection": self.collection})

    @staticmethod
    def _copy_fields(fields: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        return dict(fields or {})
