"""Caller-side validation of form input before it reaches storage."""

from typing import List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, constr, field_validator

from errors import ValidationFailed
from models import TaskSettings

TrimmedText = constr(strip_whitespace=True, min_length=1)

Role = Literal["admin", "candidate", "reviewer"]
Priority = Literal["low", "medium", "high"]

FormT = TypeVar("FormT", bound=BaseModel)

FIELD_LABELS = {
    "id": "Email",
    "name": "Name",
    "password": "Password",
    "title": "Title",
    "score": "Score",
    "comments": "Comments",
    "qIndex": "Question",
    "uri": "Recording",
}


def _clean_questions(questions: List[str]) -> List[str]:
    """Trim questions and drop the blank ones, keeping order."""
    return [q.strip() for q in questions if q.strip()]


class SignupForm(BaseModel):
    id: TrimmedText
    name: TrimmedText
    password: str = Field(..., min_length=1)
    role: Role = "candidate"


class LoginForm(BaseModel):
    id: TrimmedText
    password: str = Field(..., min_length=1)


class InterviewForm(BaseModel):
    title: TrimmedText
    description: str = ""
    questions: List[str] = Field(default_factory=list)

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        return value.strip()

    @field_validator("questions")
    @classmethod
    def drop_blank_questions(cls, value: List[str]) -> List[str]:
        return _clean_questions(value)


class AnswerForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    q_index: int = Field(..., ge=0, alias="qIndex")
    uri: TrimmedText
    id: Optional[str] = None
    recorded_at: Optional[int] = Field(None, alias="recordedAt")


class ReviewForm(BaseModel):
    """Score in [0, 10] and non-empty comments; numeric strings such as "8.5" are accepted."""
    score: float = Field(..., ge=0, le=10, allow_inf_nan=False)
    comments: TrimmedText


class TaskForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: TrimmedText
    description: str = ""
    questions: List[str] = Field(default_factory=list)
    priority: Priority = "medium"
    tags: List[str] = Field(default_factory=list)
    deadline: Optional[int] = Field(None, ge=0)
    allow_multiple_submissions: bool = Field(False, alias="allowMultipleSubmissions")
    require_all_questions: bool = Field(True, alias="requireAllQuestions")
    time_limit: Optional[int] = Field(None, ge=1, alias="timeLimit")
    auto_grade: bool = Field(False, alias="autoGrade")

    @field_validator("questions")
    @classmethod
    def drop_blank_questions(cls, value: List[str]) -> List[str]:
        return _clean_questions(value)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(t.strip() for t in value if t.strip()))

    def settings(self) -> TaskSettings:
        return TaskSettings(
            allow_multiple_submissions=self.allow_multiple_submissions,
            require_all_questions=self.require_all_questions,
            time_limit=self.time_limit,
            auto_grade=self.auto_grade,
        )


def _describe(error: dict) -> str:
    loc = [str(part) for part in error.get("loc", ())]
    field = FIELD_LABELS.get(loc[0], loc[0]) if loc else "Input"
    if error.get("type") in ("missing", "string_too_short"):
        return f"{field} is required"
    return f"{field}: {error.get('msg', 'invalid value')}"


def validate_form(model: Type[FormT], data: dict) -> FormT:
    """
    Validate form data against a model.

    Raises:
        ValidationFailed: With one readable sentence for the first problem found
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = e.errors()
        raise ValidationFailed(_describe(errors[0]) if errors else "Please fill up all details") from e
