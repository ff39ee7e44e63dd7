"""Tests for caller-side form validation."""

import pytest

from errors import ValidationFailed
from validation import (
    AnswerForm, InterviewForm, ReviewForm, SignupForm, TaskForm, validate_form,
)


class TestReviewForm:
    """Score within [0, 10] and non-empty comments."""

    @pytest.mark.parametrize("score", [0, 10, 8.5, "8.5"])
    def test_accepts_valid_scores(self, score):
        """Scores from 0 to 10, numbers or numeric text."""
        form = validate_form(ReviewForm, {"score": score, "comments": "  Solid  "})
        assert 0 <= form.score <= 10
        assert form.comments == "Solid"

    @pytest.mark.parametrize("score", [11, -0.5, "", "abc", float("nan"), None])
    def test_rejects_invalid_scores(self, score):
        """Out of range, empty, non-numeric and NaN scores fail."""
        with pytest.raises(ValidationFailed, match="Score"):
            validate_form(ReviewForm, {"score": score, "comments": "x"})

    @pytest.mark.parametrize("comments", ["", "   ", None])
    def test_rejects_blank_comments(self, comments):
        """Comments must have text after trimming."""
        with pytest.raises(ValidationFailed, match="Comments"):
            validate_form(ReviewForm, {"score": 5, "comments": comments})

    def test_missing_fields(self):
        """An empty form names the first missing field."""
        with pytest.raises(ValidationFailed, match="is required"):
            validate_form(ReviewForm, {})


class TestSignupForm:

    def test_trims_and_defaults_role(self):
        """Text is trimmed except the password; role defaults to candidate."""
        form = validate_form(SignupForm, {"id": " a@x.com ", "name": " A ", "password": " pw "})
        assert form.id == "a@x.com"
        assert form.name == "A"
        assert form.password == " pw "
        assert form.role == "candidate"

    @pytest.mark.parametrize("data", [
        {"id": "  ", "name": "A", "password": "pw"},
        {"id": "a@x.com", "name": "", "password": "pw"},
        {"id": "a@x.com", "name": "A", "password": ""},
    ])
    def test_rejects_blank_fields(self, data):
        """Id, name and password are all required."""
        with pytest.raises(ValidationFailed, match="is required"):
            validate_form(SignupForm, data)

    def test_rejects_unknown_role(self):
        """Roles are limited to the known three."""
        with pytest.raises(ValidationFailed):
            validate_form(SignupForm, {"id": "a", "name": "A", "password": "pw", "role": "root"})


class TestInterviewForm:

    def test_title_required(self):
        """A whitespace title counts as missing."""
        with pytest.raises(ValidationFailed, match="Title is required"):
            validate_form(InterviewForm, {"title": "   "})

    def test_blank_questions_dropped_in_order(self):
        """Blank questions go, the rest keep their order."""
        form = validate_form(InterviewForm, {"title": "T", "questions": [" B ", "", "A", "  "]})
        assert form.questions == ["B", "A"]


class TestAnswerForm:

    def test_accepts_camel_case(self):
        """Stored camelCase keys are accepted."""
        form = validate_form(AnswerForm, {"qIndex": 2, "uri": "a.m4a", "recordedAt": 5})
        assert form.q_index == 2
        assert form.recorded_at == 5

    def test_rejects_negative_index(self):
        """Question indices start at zero."""
        with pytest.raises(ValidationFailed, match="Question"):
            validate_form(AnswerForm, {"qIndex": -1, "uri": "a.m4a"})


class TestTaskForm:

    def test_settings_and_tags(self):
        """Settings aliases and tag cleanup."""
        form = validate_form(TaskForm, {
            "title": "T",
            "tags": ["go", " go ", ""],
            "priority": "high",
            "allowMultipleSubmissions": True,
            "timeLimit": 30,
        })
        assert form.tags == ["go"]
        settings = form.settings()
        assert settings.allow_multiple_submissions is True
        assert settings.require_all_questions is True
        assert settings.time_limit == 30

    def test_rejects_unknown_priority(self):
        """Priority must be low, medium or high."""
        with pytest.raises(ValidationFailed):
            validate_form(TaskForm, {"title": "T", "priority": "urgent"})
