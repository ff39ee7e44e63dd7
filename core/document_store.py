"""JSON collections persisted through a key-value store.

Every operation on a collection is a read of the whole document, an
in-memory change and a write of the whole document. ``transaction(key)``
serializes that sequence within one process; separate processes sharing
a backend still race, and the later write wins.
"""

import json
import threading
from collections import defaultdict
from contextlib import contextmanager

from core.kv_store import KeyValueStore
from errors import StorageFailure
from logger import log_debug, log_warning
from metrics import storage_read_failures, storage_writes, storage_write_duration, track_time

USERS_KEY = "USERS_v1"
INTERVIEWS_KEY = "INTERVIEWS_v1"
SUBMISSIONS_KEY = "SUBMISSIONS_v1"
TASKS_KEY = "TASKS_v1"
INTERVIEW_TASKS_KEY = "INTERVIEW_TASKS_v1"

STORAGE_KEYS = (USERS_KEY, INTERVIEWS_KEY, SUBMISSIONS_KEY, TASKS_KEY, INTERVIEW_TASKS_KEY)


def _is_record(item) -> bool:
    """Every stored record is an object with a non-empty string id."""
    return isinstance(item, dict) and isinstance(item.get("id"), str) and bool(item["id"])


class DocumentStore:
    """Reads and writes whole JSON arrays under string keys."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        self._locks = defaultdict(threading.RLock)
        self._locks_guard = threading.Lock()

    def exists(self, key: str) -> bool:
        """
        Check whether a document is present under key.

        Raises:
            StorageFailure: If the backend cannot answer
        """
        return self.kv.get_item(key) is not None

    def read_collection(self, key: str) -> list[dict]:
        """
        Read the array stored under key.

        Missing, unreadable or corrupt documents read as an empty list. A
        document is corrupt when it is not a JSON array of records with ids.
        """
        try:
            raw = self.kv.get_item(key)
        except StorageFailure as e:
            log_warning(f"Read failed for {key}, using empty collection: {e}", key=key)
            storage_read_failures.labels(key=key).inc()
            return []

        if raw is None:
            return []

        try:
            items = json.loads(raw)
        except ValueError as e:
            log_warning(f"Corrupt document under {key}, using empty collection: {e}", key=key)
            storage_read_failures.labels(key=key).inc()
            return []

        if not isinstance(items, list):
            log_warning(f"Document under {key} is not an array, using empty collection", key=key)
            storage_read_failures.labels(key=key).inc()
            return []

        if not all(_is_record(item) for item in items):
            log_warning(f"Document under {key} holds records without an id, using empty collection", key=key)
            storage_read_failures.labels(key=key).inc()
            return []

        return items

    @track_time(storage_write_duration)
    def write_collection(self, key: str, items: list[dict]):
        """
        Replace the array stored under key.

        Raises:
            StorageFailure: If the items cannot be serialized or the backend rejects the write
        """
        try:
            payload = json.dumps(items)
        except (TypeError, ValueError) as e:
            raise StorageFailure(f"Failed to serialize {key}: {e}") from e

        self.kv.set_item(key, payload)
        storage_writes.labels(key=key).inc()
        log_debug(f"Wrote {len(items)} records to {key}", key=key, count=len(items))

    @contextmanager
    def transaction(self, key: str):
        """Hold the per-key lock for a read-modify-write sequence."""
        with self._locks_guard:
            lock = self._locks[key]
        with lock:
            yield
