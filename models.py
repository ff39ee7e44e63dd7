"""Data models for the application."""

from dataclasses import dataclass, field
from typing import Optional


# Roles
ROLE_ADMIN = "admin"
ROLE_CANDIDATE = "candidate"
ROLE_REVIEWER = "reviewer"
ROLES = (ROLE_ADMIN, ROLE_CANDIDATE, ROLE_REVIEWER)

# Task ledger types
TASK_TYPE_INTERVIEW_SUBMISSION = "interview_submission"
TASK_TYPE_REVIEW_SUBMISSION = "review_submission"
TASK_TYPES = (TASK_TYPE_INTERVIEW_SUBMISSION, TASK_TYPE_REVIEW_SUBMISSION)

# Task ledger statuses
TASK_PENDING = "pending"
TASK_PROCESSING = "processing"
TASK_COMPLETED = "completed"
TASK_FAILED = "failed"
TASK_STATUSES = (TASK_PENDING, TASK_PROCESSING, TASK_COMPLETED, TASK_FAILED)

# Interview task statuses
INTERVIEW_TASK_ACTIVE = "active"
INTERVIEW_TASK_COMPLETED = "completed"
INTERVIEW_TASK_ARCHIVED = "archived"
INTERVIEW_TASK_STATUSES = (INTERVIEW_TASK_ACTIVE, INTERVIEW_TASK_COMPLETED, INTERVIEW_TASK_ARCHIVED)

# Priority levels
PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"
PRIORITY_LEVELS = (PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH)


def _union(existing: list[str], incoming) -> list[str]:
    """Order-preserving set union."""
    merged = list(existing)
    for item in incoming:
        if item not in merged:
            merged.append(item)
    return merged


@dataclass
class User:
    """Account record. Only a password hash is ever stored."""
    id: str
    name: str
    role: str
    password_hash: str

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "passwordHash": self.password_hash,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'User':
        """Create from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            role=data.get("role", ROLE_CANDIDATE),
            password_hash=data.get("passwordHash", ""),
        )


@dataclass
class Interview:
    """Reusable template of ordered questions."""
    id: str
    title: str
    description: str = ''
    questions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "questions": list(self.questions),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Interview':
        """Create from dictionary."""
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            description=data.get("description", ""),
            questions=list(data.get("questions") or []),
        )

    def is_recordable(self) -> bool:
        """Check if candidates can record answers against this interview."""
        return len(self.questions) > 0


@dataclass
class Answer:
    """One recorded answer, pointing at a question by index."""
    id: str
    q_index: int
    uri: str
    recorded_at: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "qIndex": self.q_index,
            "uri": self.uri,
            "recordedAt": self.recorded_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Answer':
        return cls(
            id=data.get("id", ""),
            q_index=int(data.get("qIndex") or 0),
            uri=data.get("uri", ""),
            recorded_at=data.get("recordedAt", 0),
        )


@dataclass
class Review:
    """Reviewer's evaluation of a submission."""
    score: float
    comments: str
    reviewed_at: int
    reviewer_id: str

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "comments": self.comments,
            "reviewedAt": self.reviewed_at,
            "reviewerId": self.reviewer_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Review':
        return cls(
            score=data.get("score") or 0,
            comments=data.get("comments", ""),
            reviewed_at=data.get("reviewedAt", 0),
            reviewer_id=data.get("reviewerId", ""),
        )


@dataclass
class Submission:
    """One candidate attempt at an interview."""
    id: str
    interview_id: str
    candidate_id: str
    submitted_at: int
    answers: list[Answer] = field(default_factory=list)
    review: Optional[Review] = None

    @property
    def is_pending(self) -> bool:
        """A submission without a review is pending."""
        return self.review is None

    def answered_indices(self) -> set[int]:
        return {a.q_index for a in self.answers}

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        data = {
            "id": self.id,
            "interviewId": self.interview_id,
            "candidateId": self.candidate_id,
            "submittedAt": self.submitted_at,
            "answers": [a.to_dict() for a in self.answers],
        }
        if self.review is not None:
            data["review"] = self.review.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Submission':
        """Create from dictionary."""
        review = data.get("review")
        return cls(
            id=data["id"],
            interview_id=data.get("interviewId", ""),
            candidate_id=data.get("candidateId", ""),
            submitted_at=data.get("submittedAt", 0),
            answers=[Answer.from_dict(a) for a in data.get("answers") or [] if isinstance(a, dict)],
            review=Review.from_dict(review) if isinstance(review, dict) else None,
        )


@dataclass
class TaskSettings:
    """Per-task submission rules."""
    allow_multiple_submissions: bool = False
    require_all_questions: bool = True
    time_limit: Optional[int] = None  # in minutes
    auto_grade: bool = False

    def to_dict(self) -> dict:
        return {
            "allowMultipleSubmissions": self.allow_multiple_submissions,
            "requireAllQuestions": self.require_all_questions,
            "timeLimit": self.time_limit,
            "autoGrade": self.auto_grade,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'TaskSettings':
        return cls(
            allow_multiple_submissions=data.get("allowMultipleSubmissions", False),
            require_all_questions=data.get("requireAllQuestions", True),
            time_limit=data.get("timeLimit"),
            auto_grade=data.get("autoGrade", False),
        )


@dataclass
class InterviewTask:
    """Assignment of an interview to candidates.

    Holds a reference to the interview, never a copy of its content.
    """
    id: str
    interview_id: str
    created_by: str
    created_at: int
    status: str = INTERVIEW_TASK_ACTIVE
    priority: str = PRIORITY_MEDIUM
    deadline: Optional[int] = None
    updated_at: Optional[int] = None
    assigned_candidates: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    submissions: list[str] = field(default_factory=list)
    settings: TaskSettings = field(default_factory=TaskSettings)

    def assign(self, candidate_ids) -> list[str]:
        """Union-merge candidates and return the ones that were not assigned before."""
        before = set(self.assigned_candidates)
        self.assigned_candidates = _union(self.assigned_candidates, candidate_ids)
        return [c for c in self.assigned_candidates if c not in before]

    def add_submission(self, submission_id: str):
        self.submissions = _union(self.submissions, [submission_id])

    def is_overdue(self, now: int) -> bool:
        return (
            self.status == INTERVIEW_TASK_ACTIVE
            and self.deadline is not None
            and self.deadline < now
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "interviewId": self.interview_id,
            "assignedCandidates": list(self.assigned_candidates),
            "status": self.status,
            "createdBy": self.created_by,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "deadline": self.deadline,
            "priority": self.priority,
            "tags": list(self.tags),
            "submissions": list(self.submissions),
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'InterviewTask':
        """Create from dictionary."""
        settings = data.get("settings")
        return cls(
            id=data["id"],
            interview_id=data.get("interviewId", ""),
            created_by=data.get("createdBy", ""),
            created_at=data.get("createdAt", 0),
            status=data.get("status", INTERVIEW_TASK_ACTIVE),
            priority=data.get("priority", PRIORITY_MEDIUM),
            deadline=data.get("deadline"),
            updated_at=data.get("updatedAt"),
            assigned_candidates=list(data.get("assignedCandidates") or []),
            tags=list(data.get("tags") or []),
            submissions=list(data.get("submissions") or []),
            settings=TaskSettings.from_dict(settings) if isinstance(settings, dict) else TaskSettings(),
        )


TASK_RESERVED_KEYS = ("id", "type", "data", "status", "createdAt", "updatedAt")


@dataclass
class Task:
    """Ledger entry used for notifications and audit statistics."""
    id: str
    type: str
    data: dict
    created_at: int
    updated_at: int
    status: str = TASK_PENDING
    extra: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary. Extra fields sit beside the core keys."""
        result = dict(self.extra)
        result.update({
            "id": self.id,
            "type": self.type,
            "data": self.data,
            "status": self.status,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        })
        return result

    @classmethod
    def from_dict(cls, data: dict) -> 'Task':
        """Create from dictionary."""
        return cls(
            id=data["id"],
            type=data.get("type", ""),
            data=data.get("data") or {},
            status=data.get("status", TASK_PENDING),
            created_at=data.get("createdAt", 0),
            updated_at=data.get("updatedAt", 0),
            extra={k: v for k, v in data.items() if k not in TASK_RESERVED_KEYS},
        )
