"""Notification and audit log persisted under ``TASKS_v1``."""

from typing import Callable, Dict, List, Optional

from core.document_store import DocumentStore, TASKS_KEY
from core.ids import now_ms, prefixed_id
from errors import NotFound, ValidationFailed
from logger import log_info
from metrics import ledger_tasks_created
from models import (
    Task, TASK_RESERVED_KEYS, TASK_STATUSES, TASK_TYPES,
    TASK_PENDING, TASK_COMPLETED, TASK_FAILED,
)

DAY_MS = 24 * 60 * 60 * 1000
DEFAULT_RETENTION_DAYS = 30


class TaskLedger:
    """
    Append-only log of task entries.

    Entries are created pending, have their status changed in place, and
    are removed individually or by ``cleanup``. Pending and failed entries
    are never removed by ``cleanup`` regardless of age.
    """

    def __init__(self, store: DocumentStore, clock: Callable[[], int] = now_ms,
                 retention_days: int = DEFAULT_RETENTION_DAYS):
        self.store = store
        self.clock = clock
        self.retention_days = retention_days

    def list(self) -> List[Task]:
        return [Task.from_dict(t) for t in self.store.read_collection(TASKS_KEY)]

    def get(self, task_id: str) -> Optional[Task]:
        for task in self.list():
            if task.id == task_id:
                return task
        return None

    def submit(self, task_type: str, data: dict) -> Task:
        """
        Record a new pending entry.

        Args:
            task_type: One of ``TASK_TYPES``
            data: Free-form payload stored as given

        Returns:
            The created entry
        """
        if task_type not in TASK_TYPES:
            raise ValidationFailed(f"Unknown task type: {task_type}")

        now = self.clock()
        task = Task(
            id=prefixed_id("task", now),
            type=task_type,
            data=dict(data or {}),
            status=TASK_PENDING,
            created_at=now,
            updated_at=now,
        )
        with self.store.transaction(TASKS_KEY):
            items = self.store.read_collection(TASKS_KEY)
            items.append(task.to_dict())
            self.store.write_collection(TASKS_KEY, items)

        ledger_tasks_created.labels(type=task_type).inc()
        log_info(f"Task submitted: {task.id}", task_id=task.id, task_type=task_type)
        return task

    def update_status(self, task_id: str, status: str, extra: Dict = None) -> Task:
        """
        Set an entry's status, merge extra fields and bump ``updatedAt``.

        Raises:
            NotFound: If no entry has this id
            ValidationFailed: If the status is unknown or extra fields collide with core keys
        """
        if status not in TASK_STATUSES:
            raise ValidationFailed(f"Unknown task status: {status}")
        extra = dict(extra or {})
        clashing = sorted(k for k in extra if k in TASK_RESERVED_KEYS)
        if clashing:
            raise ValidationFailed(f"Reserved task fields cannot be overwritten: {', '.join(clashing)}")

        with self.store.transaction(TASKS_KEY):
            items = self.store.read_collection(TASKS_KEY)
            for index, item in enumerate(items):
                if item.get("id") == task_id:
                    task = Task.from_dict(item)
                    task.status = status
                    task.updated_at = self.clock()
                    task.extra.update(extra)
                    items[index] = task.to_dict()
                    self.store.write_collection(TASKS_KEY, items)
                    break
            else:
                raise NotFound("Task", task_id)

        log_info(f"Task {task_id} -> {status}", task_id=task_id, status=status)
        return task

    def list_by_type(self, task_type: str) -> List[Task]:
        return [t for t in self.list() if t.type == task_type]

    def list_by_status(self, status: str) -> List[Task]:
        return [t for t in self.list() if t.status == status]

    def delete(self, task_id: str) -> bool:
        """
        Remove one entry.

        Returns:
            True if an entry was removed, False if the id was absent
        """
        with self.store.transaction(TASKS_KEY):
            items = self.store.read_collection(TASKS_KEY)
            remaining = [t for t in items if t.get("id") != task_id]
            if len(remaining) == len(items):
                return False
            self.store.write_collection(TASKS_KEY, remaining)

        log_info(f"Task deleted: {task_id}", task_id=task_id)
        return True

    def stats(self) -> dict:
        """Aggregate counts over a single read of the ledger."""
        tasks = self.list()
        stats = {
            "total": len(tasks),
            "pending": sum(1 for t in tasks if t.status == TASK_PENDING),
            "completed": sum(1 for t in tasks if t.status == TASK_COMPLETED),
            "failed": sum(1 for t in tasks if t.status == TASK_FAILED),
        }
        for task_type in TASK_TYPES:
            stats[f"{task_type}s"] = sum(1 for t in tasks if t.type == task_type)
        return stats

    def cleanup(self, max_age_days: int = None) -> int:
        """
        Remove completed entries last updated more than ``max_age_days`` ago.

        Returns:
            Number of removed entries
        """
        days = self.retention_days if max_age_days is None else max_age_days
        cutoff = self.clock() - days * DAY_MS

        with self.store.transaction(TASKS_KEY):
            items = self.store.read_collection(TASKS_KEY)
            kept = [
                t for t in items
                if t.get("status") != TASK_COMPLETED or (t.get("updatedAt") or 0) >= cutoff
            ]
            removed = len(items) - len(kept)
            if removed:
                self.store.write_collection(TASKS_KEY, kept)

        log_info(f"Cleaned up {removed} old tasks", count=removed, max_age_days=days)
        return removed
