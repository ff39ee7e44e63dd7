"""Shared fixtures for tests."""

import pytest

from auth import build_password_context
from core.accounts import AccountDirectory
from core.catalog import InterviewCatalog
from core.coordinator import InterviewTaskCoordinator
from core.document_store import DocumentStore
from core.kv_store import KeyValueStore, MemoryKeyValueStore
from core.submissions import SubmissionLedger
from core.task_ledger import TaskLedger
from errors import StorageFailure

START_MS = 1_700_000_000_000
DAY_MS = 24 * 60 * 60 * 1000


class FakeClock:
    """Deterministic epoch-millisecond clock."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1):
        self.now += ms


class BrokenKeyValueStore(KeyValueStore):
    """Backend that rejects reads and/or writes."""

    def __init__(self, fail_reads: bool = True, fail_writes: bool = True):
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.inner = MemoryKeyValueStore()

    def get_item(self, key):
        if self.fail_reads:
            raise StorageFailure(f"read rejected: {key}")
        return self.inner.get_item(key)

    def set_item(self, key, value):
        if self.fail_writes:
            raise StorageFailure(f"write rejected: {key}")
        self.inner.set_item(key, value)

    def remove_item(self, key):
        self.inner.remove_item(key)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return DocumentStore(kv)


@pytest.fixture
def password_context():
    """Cheap hashing scheme so tests stay fast."""
    return build_password_context(["pbkdf2_sha256"])


@pytest.fixture
def accounts(store, password_context):
    return AccountDirectory(store, password_context)


@pytest.fixture
def catalog(store):
    return InterviewCatalog(store)


@pytest.fixture
def submissions(store):
    return SubmissionLedger(store)


@pytest.fixture
def ledger(store, clock):
    return TaskLedger(store, clock=clock)


@pytest.fixture
def coordinator(store, catalog, submissions, ledger, clock):
    return InterviewTaskCoordinator(store, catalog, submissions, ledger, clock=clock)
