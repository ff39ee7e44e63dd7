"""Interview tasks: assigning interviews to candidates and tracking their submissions.

Interview content lives only in the catalog. A task stores the interview's
id and reads title, description and questions from the catalog when needed.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from core.catalog import InterviewCatalog
from core.document_store import DocumentStore, INTERVIEW_TASKS_KEY
from core.ids import now_ms, prefixed_id
from core.submissions import SubmissionLedger
from core.task_ledger import TaskLedger
from errors import InterviewTasksError, NotFound, ValidationFailed
from logger import log_info, log_warning
from metrics import interview_tasks_created
from models import (
    Answer, Interview, InterviewTask, Submission, TaskSettings,
    INTERVIEW_TASK_ACTIVE, INTERVIEW_TASK_ARCHIVED, INTERVIEW_TASK_COMPLETED, INTERVIEW_TASK_STATUSES,
    PRIORITY_HIGH, PRIORITY_LEVELS, PRIORITY_MEDIUM, TASK_TYPE_INTERVIEW_SUBMISSION,
)

# Fields a direct update may change
UPDATABLE_FIELDS = ("status", "priority", "deadline", "tags", "settings")


def _normalize_changes(changes: dict) -> dict:
    """Check the fields of a direct task update and coerce them to stored types."""
    unknown = sorted(k for k in changes if k not in UPDATABLE_FIELDS)
    if unknown:
        raise ValidationFailed(f"Fields cannot be updated: {', '.join(unknown)}")

    normalized = dict(changes)
    if "status" in normalized and normalized["status"] not in INTERVIEW_TASK_STATUSES:
        raise ValidationFailed(f"Unknown interview task status: {normalized['status']}")
    if "priority" in normalized and normalized["priority"] not in PRIORITY_LEVELS:
        raise ValidationFailed(f"Unknown priority: {normalized['priority']}")

    if "deadline" in normalized:
        deadline = normalized["deadline"]
        if deadline is not None and (isinstance(deadline, bool) or not isinstance(deadline, int)):
            raise ValidationFailed("Deadline must be epoch milliseconds or empty")

    if "tags" in normalized:
        tags = normalized["tags"]
        if not isinstance(tags, (list, tuple)) or not all(isinstance(t, str) for t in tags):
            raise ValidationFailed("Tags must be a list of text values")
        normalized["tags"] = list(dict.fromkeys(tags))

    if "settings" in normalized:
        settings = normalized["settings"]
        if isinstance(settings, dict):
            normalized["settings"] = TaskSettings.from_dict(settings)
        elif not isinstance(settings, TaskSettings):
            raise ValidationFailed("Settings must be task settings")

    return normalized


@dataclass
class BulkResult:
    """Outcome of one task inside a bulk operation."""
    task_id: str
    success: bool
    data: Optional[InterviewTask] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        result = {"taskId": self.task_id, "success": self.success}
        if self.success:
            result["data"] = self.data.to_dict() if self.data else None
        else:
            result["error"] = self.error
        return result


class InterviewTaskCoordinator:
    """Creates interview tasks, assigns candidates and records their responses."""

    def __init__(
        self,
        store: DocumentStore,
        catalog: InterviewCatalog,
        submissions: SubmissionLedger,
        ledger: TaskLedger,
        clock: Callable[[], int] = now_ms,
        default_creator: str = "admin@test.com",
        enforce_settings: bool = False,
    ):
        self.store = store
        self.catalog = catalog
        self.submissions = submissions
        self.ledger = ledger
        self.clock = clock
        self.default_creator = default_creator
        self.enforce_settings = enforce_settings

    # ============= Reads =============

    def list_tasks(self) -> List[InterviewTask]:
        return [InterviewTask.from_dict(t) for t in self.store.read_collection(INTERVIEW_TASKS_KEY)]

    def get_task(self, task_id: str) -> Optional[InterviewTask]:
        """Get interview task by ID."""
        for task in self.list_tasks():
            if task.id == task_id:
                return task
        return None

    def _require_task(self, task_id: str) -> InterviewTask:
        task = self.get_task(task_id)
        if task is None:
            raise NotFound("Interview task", task_id)
        return task

    def get_task_detail(self, task_id: str) -> dict:
        """
        Task record joined with its interview's content.

        A task whose interview was deleted from the catalog reports empty content.
        """
        task = self._require_task(task_id)
        interview = self.catalog.get(task.interview_id)
        detail = task.to_dict()
        detail["title"] = interview.title if interview else ""
        detail["description"] = interview.description if interview else ""
        detail["questions"] = list(interview.questions) if interview else []
        return detail

    def tasks_for_candidate(self, candidate_id: str) -> List[InterviewTask]:
        """Active tasks the candidate is assigned to."""
        return [
            t for t in self.list_tasks()
            if t.status == INTERVIEW_TASK_ACTIVE and candidate_id in t.assigned_candidates
        ]

    def get_submissions_for_task(self, task_id: str) -> List[Submission]:
        """
        Submissions recorded through this task.

        Raises:
            NotFound: If the task does not exist
        """
        task = self._require_task(task_id)
        wanted = set(task.submissions)
        return [s for s in self.submissions.list() if s.id in wanted]

    def search_tasks(self, query: str) -> List[InterviewTask]:
        """Case-insensitive match on interview title, description or task tags."""
        needle = query.lower()
        interviews = {i.id: i for i in self.catalog.list()}
        matches = []
        for task in self.list_tasks():
            interview = interviews.get(task.interview_id)
            title = interview.title if interview else ""
            description = interview.description if interview else ""
            if (
                needle in title.lower()
                or needle in description.lower()
                or any(needle in tag.lower() for tag in task.tags)
            ):
                matches.append(task)
        return matches

    def overdue_tasks(self) -> List[InterviewTask]:
        """Active tasks whose deadline has passed."""
        now = self.clock()
        return [t for t in self.list_tasks() if t.is_overdue(now)]

    def statistics(self) -> dict:
        """Aggregate counts; assignment and submission totals are sums of per-task sizes."""
        tasks = self.list_tasks()
        return {
            "total": len(tasks),
            "active": sum(1 for t in tasks if t.status == INTERVIEW_TASK_ACTIVE),
            "completed": sum(1 for t in tasks if t.status == INTERVIEW_TASK_COMPLETED),
            "archived": sum(1 for t in tasks if t.status == INTERVIEW_TASK_ARCHIVED),
            "highPriority": sum(1 for t in tasks if t.priority == PRIORITY_HIGH),
            "totalAssignments": sum(len(t.assigned_candidates) for t in tasks),
            "totalSubmissions": sum(len(t.submissions) for t in tasks),
        }

    # ============= Writes =============

    def create_task(
        self,
        title: str = "",
        description: str = "",
        questions: Iterable[str] = (),
        interview_id: str = None,
        created_by: str = None,
        deadline: int = None,
        priority: str = None,
        tags: Iterable[str] = (),
        settings: TaskSettings = None,
    ) -> InterviewTask:
        """
        Create an active interview task.

        When ``interview_id`` is given the task points at that existing
        interview; otherwise a new interview is added to the catalog from
        ``title``, ``description`` and ``questions``.

        Raises:
            NotFound: If ``interview_id`` is given but not in the catalog
        """
        now = self.clock()
        if interview_id is not None:
            if self.catalog.get(interview_id) is None:
                raise NotFound("Interview", interview_id)
        else:
            interview = Interview(id="", title=title, description=description, questions=list(questions))
            self.catalog.create(interview)
            interview_id = interview.id

        task = InterviewTask(
            id=prefixed_id("interview_task", now),
            interview_id=interview_id,
            created_by=created_by or self.default_creator,
            created_at=now,
            status=INTERVIEW_TASK_ACTIVE,
            priority=priority or PRIORITY_MEDIUM,
            deadline=deadline,
            tags=list(dict.fromkeys(tags)),
            settings=settings or TaskSettings(),
        )

        with self.store.transaction(INTERVIEW_TASKS_KEY):
            items = self.store.read_collection(INTERVIEW_TASKS_KEY)
            items.append(task.to_dict())
            self.store.write_collection(INTERVIEW_TASKS_KEY, items)

        interview_tasks_created.inc()
        log_info(f"Interview task created: {task.id}", task_id=task.id, interview_id=interview_id)
        return task

    def _modify(self, task_id: str, change: Callable[[InterviewTask], Any]) -> tuple[InterviewTask, Any]:
        """Read-modify-write one task under the collection lock."""
        with self.store.transaction(INTERVIEW_TASKS_KEY):
            items = self.store.read_collection(INTERVIEW_TASKS_KEY)
            for index, item in enumerate(items):
                if item.get("id") == task_id:
                    task = InterviewTask.from_dict(item)
                    outcome = change(task)
                    task.updated_at = self.clock()
                    items[index] = task.to_dict()
                    self.store.write_collection(INTERVIEW_TASKS_KEY, items)
                    return task, outcome
        raise NotFound("Interview task", task_id)

    def update_task(self, task_id: str, **changes) -> InterviewTask:
        """
        Directly set task fields. This is the only way to mark a task completed.

        ``settings`` may be a ``TaskSettings`` or its stored dict shape.
        Archived and completed tasks keep their status.

        Raises:
            NotFound: If the task does not exist
            ValidationFailed: If a field is not updatable, a value has the wrong
                type, or the status change leaves a finished task
        """
        changes = _normalize_changes(changes)

        def apply(task: InterviewTask):
            new_status = changes.get("status", task.status)
            if new_status != task.status and task.status != INTERVIEW_TASK_ACTIVE:
                raise ValidationFailed(f"A {task.status} task cannot become {new_status}")
            for name, value in changes.items():
                setattr(task, name, value)

        task, _ = self._modify(task_id, apply)
        log_info(f"Interview task updated: {task_id}", task_id=task_id, fields=sorted(changes))
        return task

    def archive(self, task_id: str) -> InterviewTask:
        return self.update_task(task_id, status=INTERVIEW_TASK_ARCHIVED)

    def assign(self, task_id: str, candidate_ids: Iterable[str]) -> InterviewTask:
        """
        Add candidates to a task. Candidates already assigned are left as they are.

        One ``interview_submission`` ledger entry is written per newly assigned candidate.

        Raises:
            NotFound: If the task does not exist
        """
        candidate_ids = list(candidate_ids)
        task, added = self._modify(task_id, lambda t: t.assign(candidate_ids))

        if task.status != INTERVIEW_TASK_ACTIVE:
            log_warning(f"Candidates assigned to {task.status} task {task_id}", task_id=task_id)

        title = self._title_of(task)
        for candidate_id in added:
            self.ledger.submit(TASK_TYPE_INTERVIEW_SUBMISSION, {
                "taskId": task_id,
                "candidateId": candidate_id,
                "type": "assignment",
                "message": f"New interview task assigned: {title}",
            })

        log_info(f"Assigned {len(added)} candidates to {task_id}", task_id=task_id, count=len(added))
        return task

    def submit_response(self, task_id: str, candidate_id: str, answers: Iterable[Answer]) -> Submission:
        """
        Record a candidate's answers for a task.

        Raises:
            NotFound: If the task does not exist
            ValidationFailed: If the interview has no questions, or task settings
                are enforced and the response breaks them
        """
        task = self._require_task(task_id)
        answers = list(answers)
        interview = self.catalog.get(task.interview_id)
        if interview is None or not interview.is_recordable():
            raise ValidationFailed("This interview has no questions to answer")
        if self.enforce_settings:
            self._check_settings(task, interview, candidate_id, answers)

        submission = Submission(
            id=prefixed_id("sub", self.clock()),
            interview_id=task.interview_id,
            candidate_id=candidate_id,
            submitted_at=self.clock(),
            answers=answers,
        )
        self.submissions.append(submission)
        self._modify(task_id, lambda t: t.add_submission(submission.id))

        self.ledger.submit(TASK_TYPE_INTERVIEW_SUBMISSION, {
            "taskId": task_id,
            "candidateId": candidate_id,
            "submissionId": submission.id,
            "type": "submission",
            "message": f"Interview submitted: {interview.title}",
        })
        return submission

    def _check_settings(self, task: InterviewTask, interview: Interview, candidate_id: str,
                        answers: List[Answer]):
        if candidate_id not in task.assigned_candidates:
            raise ValidationFailed(f"{candidate_id} is not assigned to this interview")

        if not task.settings.allow_multiple_submissions:
            earlier = {s.candidate_id for s in self.get_submissions_for_task(task.id)}
            if candidate_id in earlier:
                raise ValidationFailed("This interview accepts only one submission per candidate")

        if task.settings.require_all_questions:
            missing = set(range(len(interview.questions))) - {a.q_index for a in answers}
            if missing:
                numbers = ", ".join(str(i + 1) for i in sorted(missing))
                raise ValidationFailed(f"Please answer every question (missing: {numbers})")

    def _title_of(self, task: InterviewTask) -> str:
        interview = self.catalog.get(task.interview_id)
        return interview.title if interview else task.interview_id

    # ============= Bulk =============

    def _bulk(self, task_ids: Iterable[str], operation: Callable[[str], InterviewTask]) -> List[BulkResult]:
        results = []
        for task_id in task_ids:
            try:
                results.append(BulkResult(task_id=task_id, success=True, data=operation(task_id)))
            except InterviewTasksError as e:
                log_warning(f"Bulk operation failed for {task_id}: {e}", task_id=task_id)
                results.append(BulkResult(task_id=task_id, success=False, error=str(e)))
        return results

    def bulk_assign(self, task_ids: Iterable[str], candidate_ids: Iterable[str]) -> List[BulkResult]:
        """Assign the same candidates to each task, continuing past failures."""
        candidate_ids = list(candidate_ids)
        return self._bulk(task_ids, lambda task_id: self.assign(task_id, candidate_ids))

    def bulk_archive(self, task_ids: Iterable[str]) -> List[BulkResult]:
        return self._bulk(task_ids, self.archive)
