"""Application facade: the actions behind each screen, without any rendering.

Every action returns an ``ActionResult`` carrying at most one notice for the
user. Known failures are logged, counted and turned into a failure notice;
nothing is retried.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from passlib.context import CryptContext

from auth import build_password_context
from config import Config, config as default_config
from core.accounts import AccountDirectory
from core.catalog import InterviewCatalog
from core.coordinator import InterviewTaskCoordinator
from core.document_store import DocumentStore
from core.ids import now_ms, uuid_id
from core.kv_store import KeyValueStore, MemoryKeyValueStore, SqlKeyValueStore
from core.seed import init_storage
from core.submissions import SubmissionLedger
from core.task_ledger import TaskLedger
from database import build_engine, build_session_factory, init_db
from errors import DuplicateId, InterviewTasksError, NotFound, StorageFailure, ValidationFailed
from logger import log_error, log_info, log_warning
from metrics import error_count
from models import (
    Answer, Interview, Review, Submission,
    ROLE_ADMIN, ROLE_CANDIDATE, ROLE_REVIEWER,
    TASK_COMPLETED, TASK_TYPE_INTERVIEW_SUBMISSION, TASK_TYPE_REVIEW_SUBMISSION,
)
from validation import (
    AnswerForm, InterviewForm, LoginForm, ReviewForm, SignupForm, TaskForm, validate_form,
)

HOME_SCREENS = {
    ROLE_ADMIN: "Admin",
    ROLE_CANDIDATE: "Candidate",
    ROLE_REVIEWER: "Reviewer",
}


@dataclass
class Notice:
    """Single human-readable message shown to the user."""
    title: str
    message: str


@dataclass
class ActionResult:
    success: bool
    notice: Optional[Notice] = None
    data: Any = None


def home_screen(role: str) -> str:
    """Screen a user lands on after login."""
    return HOME_SCREENS.get(role, HOME_SCREENS[ROLE_REVIEWER])


def review_status_label(submission: Submission) -> str:
    if submission.review is not None:
        return f"Reviewed ({submission.review.score:g}/10)"
    return "Pending Review"


class InterviewApp:
    """Composes the lifecycle components around one document store."""

    def __init__(
        self,
        store: DocumentStore,
        password_context: CryptContext = None,
        app_config: Config = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.config = app_config or default_config
        self.store = store
        self.clock = clock
        self.accounts = AccountDirectory(store, password_context)
        self.catalog = InterviewCatalog(store)
        self.submissions = SubmissionLedger(store)
        self.ledger = TaskLedger(store, clock=clock, retention_days=self.config.task_retention_days)
        self.coordinator = InterviewTaskCoordinator(
            store,
            self.catalog,
            self.submissions,
            self.ledger,
            clock=clock,
            default_creator=self.config.default_task_creator,
            enforce_settings=self.config.enforce_task_settings,
        )

    def _fail(self, action: str, error: InterviewTasksError, notice: Notice = None) -> ActionResult:
        log_warning(f"{action} failed: {error}", action=action, error_type=type(error).__name__)
        error_count.labels(error_type=type(error).__name__, action=action).inc()
        return ActionResult(success=False, notice=notice or Notice(error.title, str(error)))

    # ============= Accounts =============

    def signup(self, data: dict) -> ActionResult:
        try:
            form = validate_form(SignupForm, data)
            user = self.accounts.register(form.id, form.name, form.role, form.password)
        except DuplicateId as e:
            return self._fail("signup", e, Notice("User Exists", "This email is already registered"))
        except InterviewTasksError as e:
            return self._fail("signup", e)
        return ActionResult(True, Notice("Success", "Account created successfully!"), user)

    def login(self, data: dict) -> ActionResult:
        """On success ``data`` holds the user and the screen to open."""
        try:
            form = validate_form(LoginForm, data)
            user = self.accounts.authenticate(form.id, form.password)
        except NotFound as e:
            return self._fail("login", e, Notice("Login Failed", "Invalid credentials"))
        except InterviewTasksError as e:
            return self._fail("login", e)
        return ActionResult(True, None, {"user": user, "screen": home_screen(user.role)})

    # ============= Interviews =============

    def save_interview(self, data: dict, editing_id: str = None) -> ActionResult:
        """Create an interview, or edit one. An edit without questions keeps the old ones."""
        try:
            form = validate_form(InterviewForm, data)
            if editing_id:
                existing = self.catalog.get(editing_id)
                if existing is None:
                    raise NotFound("Interview", editing_id)
                interview = self.catalog.update(
                    editing_id,
                    title=form.title,
                    description=form.description,
                    questions=form.questions or existing.questions,
                )
            else:
                interview = Interview(id="", title=form.title, description=form.description,
                                      questions=form.questions)
                self.catalog.create(interview)
        except InterviewTasksError as e:
            return self._fail("save_interview", e)
        verb = "updated" if editing_id else "created"
        return ActionResult(True, Notice("Success", f"Interview {verb} successfully!"), interview)

    def delete_interview(self, interview_id: str) -> ActionResult:
        try:
            remaining = self.catalog.delete(interview_id)
        except StorageFailure as e:
            return self._fail("delete_interview", e,
                              Notice("Error", "Failed to delete interview. Please try again."))
        return ActionResult(True, Notice("Success", "Interview deleted successfully!"), remaining)

    def candidate_dashboard(self, candidate_id: str) -> dict:
        """Interviews with a completed flag, plus the candidate's active tasks."""
        completed = {s.interview_id for s in self.submissions.for_candidate(candidate_id)}
        interviews = [
            {
                "id": i.id,
                "title": i.title,
                "description": i.description,
                "questionCount": len(i.questions),
                "completed": i.id in completed,
            }
            for i in self.catalog.list()
        ]
        tasks = [self.coordinator.get_task_detail(t.id)
                 for t in self.coordinator.tasks_for_candidate(candidate_id)]
        return {"interviews": interviews, "tasks": tasks}

    def submit_answers(self, candidate_id: str, answers: Iterable[dict],
                       interview_id: str = None, task_id: str = None) -> ActionResult:
        """Save a candidate's recorded answers, directly or through an interview task."""
        try:
            parsed = self._parse_answers(answers)
            if task_id:
                questions = self.coordinator.get_task_detail(task_id)["questions"]
                self._check_answer_range(parsed, questions)
                submission = self.coordinator.submit_response(task_id, candidate_id, parsed)
            else:
                interview = self.catalog.get(interview_id)
                if interview is None:
                    raise NotFound("Interview", interview_id)
                if not interview.is_recordable():
                    raise ValidationFailed("This interview has no questions to answer")
                self._check_answer_range(parsed, interview.questions)
                submission = Submission(
                    id=uuid_id(),
                    interview_id=interview.id,
                    candidate_id=candidate_id,
                    submitted_at=self.clock(),
                    answers=parsed,
                )
                self.submissions.append(submission)
                self.ledger.submit(TASK_TYPE_INTERVIEW_SUBMISSION, {
                    "interviewId": interview.id,
                    "candidateId": candidate_id,
                    "submissionId": submission.id,
                    "type": "submission",
                    "message": f"Interview submitted: {interview.title}",
                })
        except StorageFailure as e:
            return self._fail("submit_answers", e, Notice("Error", "Failed to save answers."))
        except InterviewTasksError as e:
            return self._fail("submit_answers", e)
        return ActionResult(True, Notice("Success", "Your answers have been saved."), submission)

    def _parse_answers(self, answers: Iterable[dict]) -> List[Answer]:
        parsed = []
        for raw in answers:
            form = validate_form(AnswerForm, raw)
            parsed.append(Answer(
                id=form.id or uuid_id(),
                q_index=form.q_index,
                uri=form.uri,
                recorded_at=form.recorded_at if form.recorded_at is not None else self.clock(),
            ))
        if not parsed:
            raise ValidationFailed("Record at least one answer before submitting")
        return parsed

    @staticmethod
    def _check_answer_range(answers: List[Answer], questions: List[str]):
        for answer in answers:
            if answer.q_index >= len(questions):
                raise ValidationFailed(f"Question {answer.q_index + 1} does not exist")

    # ============= Reviews =============

    def reviewer_dashboard(self) -> dict:
        """Submissions enriched with their interview, plus pending and reviewed counts."""
        interviews = {i.id: i for i in self.catalog.list()}
        rows = []
        for submission in self.submissions.list():
            interview = interviews.get(submission.interview_id)
            row = submission.to_dict()
            row["interviewTitle"] = interview.title if interview else "Unknown Interview"
            row["interviewDescription"] = interview.description if interview else ""
            row["questionsCount"] = len(interview.questions) if interview else 0
            row["statusLabel"] = review_status_label(submission)
            rows.append(row)
        pending = sum(1 for r in rows if "review" not in r)
        return {"submissions": rows, "pending": pending, "reviewed": len(rows) - pending}

    def save_review(self, submission_id: str, reviewer_id: str, data: dict) -> ActionResult:
        try:
            form = validate_form(ReviewForm, data)
            review = Review(
                score=form.score,
                comments=form.comments,
                reviewed_at=self.clock(),
                reviewer_id=reviewer_id,
            )
            submission = self.submissions.attach_review(submission_id, review)
            entry = self.ledger.submit(TASK_TYPE_REVIEW_SUBMISSION, {
                "submissionId": submission_id,
                "reviewerId": reviewer_id,
                "score": form.score,
            })
            self.ledger.update_status(entry.id, TASK_COMPLETED)
        except ValidationFailed as e:
            return self._fail("save_review", e, Notice("Validation Error", "Please fill up all details"))
        except StorageFailure as e:
            return self._fail("save_review", e,
                              Notice("Save Error", "Failed to save review. Please try again."))
        except InterviewTasksError as e:
            return self._fail("save_review", e)
        return ActionResult(True, Notice("Success", "Review submitted successfully!"), submission)

    # ============= Interview tasks =============

    def create_interview_task(self, data: dict, created_by: str = None) -> ActionResult:
        try:
            form = validate_form(TaskForm, data)
            task = self.coordinator.create_task(
                title=form.title,
                description=form.description,
                questions=form.questions,
                created_by=created_by,
                deadline=form.deadline,
                priority=form.priority,
                tags=form.tags,
                settings=form.settings(),
            )
        except InterviewTasksError as e:
            return self._fail("create_interview_task", e)
        return ActionResult(True, Notice("Success", "Interview task created successfully!"), task)

    def assign_candidates(self, task_id: str, candidate_ids: Iterable[str]) -> ActionResult:
        try:
            task = self.coordinator.assign(task_id, candidate_ids)
        except InterviewTasksError as e:
            return self._fail("assign_candidates", e)
        return ActionResult(True, Notice("Success", "Candidates assigned successfully!"), task)

    def task_dashboard(self) -> dict:
        recent = sorted(self.ledger.list(), key=lambda t: t.created_at, reverse=True)
        return {
            "taskStats": self.ledger.stats(),
            "interviewTaskStats": self.coordinator.statistics(),
            "recentTasks": recent[:self.config.recent_tasks_limit],
        }

    def cleanup_tasks(self) -> ActionResult:
        try:
            removed = self.ledger.cleanup()
        except StorageFailure as e:
            return self._fail("cleanup_tasks", e, Notice("Error", "Failed to cleanup tasks"))
        return ActionResult(True, Notice("Success", f"Cleaned up {removed} old tasks"), removed)


def build_kv_store(app_config: Config) -> KeyValueStore:
    """Key-value backend selected by configuration."""
    if app_config.storage_backend == "sql":
        engine = build_engine(app_config.database_url)
        init_db(engine)
        return SqlKeyValueStore(build_session_factory(engine))
    return MemoryKeyValueStore()


def create_app(app_config: Config = None, kv: KeyValueStore = None,
               clock: Callable[[], int] = now_ms) -> InterviewApp:
    """Build the application and seed storage on first run."""
    app_config = app_config or default_config
    if not app_config.validate():
        log_warning("Configuration has problems, continuing with the given values")

    store = DocumentStore(kv or build_kv_store(app_config))
    password_context = build_password_context(app_config.password_scheme_list)

    if app_config.seed_defaults:
        try:
            init_storage(store, password_context)
        except StorageFailure as e:
            log_error(f"Storage initialization failed: {e}")

    log_info("Application ready", backend=app_config.storage_backend)
    return InterviewApp(store, password_context=password_context, app_config=app_config, clock=clock)
