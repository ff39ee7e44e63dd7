"""Tests for SubmissionLedger."""

import pytest

from core.document_store import SUBMISSIONS_KEY
from errors import NotFound
from models import Answer, Review, Submission


def make_submission(submission_id="s1", interview_id="i1", candidate_id="c1"):
    return Submission(
        id=submission_id,
        interview_id=interview_id,
        candidate_id=candidate_id,
        submitted_at=1000,
        answers=[Answer(id="a1", q_index=0, uri="file:///a.m4a", recorded_at=900)],
    )


class TestSubmissionLedger:
    """Appending submissions and attaching reviews."""

    def test_append_and_list(self, submissions):
        """Submissions are listed in append order."""
        submissions.append(make_submission("s1"))
        submissions.append(make_submission("s2"))
        assert [s.id for s in submissions.list()] == ["s1", "s2"]
        assert submissions.get("s1").answers[0].uri == "file:///a.m4a"

    def test_resubmission_creates_new_record(self, submissions):
        """A repeat submission is a separate record."""
        submissions.append(make_submission("s1", "i1", "c1"))
        submissions.append(make_submission("s2", "i1", "c1"))
        assert len(submissions.for_candidate("c1")) == 2
        assert len(submissions.for_interview("i1")) == 2

    def test_new_submission_is_pending(self, submissions):
        """Submissions start without a review."""
        submissions.append(make_submission())
        assert submissions.get("s1").is_pending
        assert [s.id for s in submissions.pending()] == ["s1"]
        assert submissions.reviewed() == []

    def test_attach_review(self, submissions):
        """Attaching a review moves the submission out of pending."""
        submissions.append(make_submission())
        review = Review(score=8.5, comments="Clear answers", reviewed_at=2000, reviewer_id="r1")
        result = submissions.attach_review("s1", review)
        assert result.review == review
        assert submissions.get("s1").review == review
        assert submissions.pending() == []

    def test_attach_review_missing_submission(self, submissions):
        """Reviewing an absent submission raises NotFound."""
        with pytest.raises(NotFound):
            submissions.attach_review("absent", Review(5, "ok", 1, "r1"))

    def test_attach_same_review_twice_is_idempotent(self, submissions):
        """The same review twice leaves the same state."""
        submissions.append(make_submission())
        review = Review(score=7, comments="Good", reviewed_at=2000, reviewer_id="r1")
        submissions.attach_review("s1", review)
        once = submissions.list()
        submissions.attach_review("s1", review)
        assert submissions.list() == once

    def test_different_review_overwrites_without_merging(self, submissions):
        """A new review replaces the old one whole."""
        submissions.append(make_submission())
        submissions.attach_review("s1", Review(3, "Weak", 2000, "r1"))
        submissions.attach_review("s1", Review(9, "Strong", 3000, "r2"))
        assert submissions.get("s1").review == Review(9, "Strong", 3000, "r2")

    def test_ledger_does_not_enforce_review_range(self, submissions):
        """Score range checks belong to the form layer."""
        submissions.append(make_submission())
        submissions.attach_review("s1", Review(score=11, comments="x", reviewed_at=1, reviewer_id="r1"))
        assert submissions.get("s1").review.score == 11

    def test_malformed_answers_and_review_are_skipped(self, submissions, store):
        """Stray answer items and a non-object review do not break reads."""
        store.write_collection(SUBMISSIONS_KEY, [
            {"id": "s1", "answers": [1, {"qIndex": None, "uri": "a.m4a"}], "review": "bad"},
        ])
        submission = submissions.get("s1")
        assert [(a.q_index, a.uri) for a in submission.answers] == [(0, "a.m4a")]
        assert submission.review is None
        assert submissions.pending() == [submission]
