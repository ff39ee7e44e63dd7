"""Key-value backends holding one string document per key."""

from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from db_operations import get_document, set_document, delete_document
from errors import StorageFailure


class KeyValueStore(ABC):
    """Durable string-keyed storage read and written one whole document at a time."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the document under key, or None if absent."""

    @abstractmethod
    def set_item(self, key: str, value: str):
        """Replace the document under key."""

    @abstractmethod
    def remove_item(self, key: str):
        """Remove the document under key if present."""


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] = None):
        self._data = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str):
        self._data[key] = value

    def remove_item(self, key: str):
        self._data.pop(key, None)


class SqlKeyValueStore(KeyValueStore):
    """Store backed by the ``kv_documents`` table."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_item(self, key: str) -> Optional[str]:
        try:
            with self.session_factory() as db:
                return get_document(db, key)
        except SQLAlchemyError as e:
            raise StorageFailure(f"Failed to read {key}: {e}") from e

    def set_item(self, key: str, value: str):
        try:
            with self.session_factory() as db:
                set_document(db, key, value)
        except SQLAlchemyError as e:
            raise StorageFailure(f"Failed to write {key}: {e}") from e

    def remove_item(self, key: str):
        try:
            with self.session_factory() as db:
                delete_document(db, key)
        except SQLAlchemyError as e:
            raise StorageFailure(f"Failed to remove {key}: {e}") from e
