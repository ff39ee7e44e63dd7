"""Candidate submissions and their reviews, persisted under ``SUBMISSIONS_v1``."""

from typing import List, Optional

from core.document_store import DocumentStore, SUBMISSIONS_KEY
from errors import NotFound
from logger import log_info
from metrics import submissions_created, reviews_attached
from models import Review, Submission


class SubmissionLedger:
    """
    Append-only list of submissions.

    The ledger does not validate payloads: ids must be unique and review
    fields must be checked by the caller before they reach it.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def list(self) -> List[Submission]:
        return [Submission.from_dict(s) for s in self.store.read_collection(SUBMISSIONS_KEY)]

    def get(self, submission_id: str) -> Optional[Submission]:
        for submission in self.list():
            if submission.id == submission_id:
                return submission
        return None

    def for_candidate(self, candidate_id: str) -> List[Submission]:
        return [s for s in self.list() if s.candidate_id == candidate_id]

    def for_interview(self, interview_id: str) -> List[Submission]:
        return [s for s in self.list() if s.interview_id == interview_id]

    def pending(self) -> List[Submission]:
        """Submissions still waiting for a review."""
        return [s for s in self.list() if s.is_pending]

    def reviewed(self) -> List[Submission]:
        return [s for s in self.list() if not s.is_pending]

    def append(self, submission: Submission) -> Submission:
        """Persist a new submission."""
        with self.store.transaction(SUBMISSIONS_KEY):
            items = self.store.read_collection(SUBMISSIONS_KEY)
            items.append(submission.to_dict())
            self.store.write_collection(SUBMISSIONS_KEY, items)

        submissions_created.inc()
        log_info(
            f"Submission recorded: {submission.id}",
            submission_id=submission.id,
            interview_id=submission.interview_id,
            candidate_id=submission.candidate_id,
        )
        return submission

    def attach_review(self, submission_id: str, review: Review) -> Submission:
        """
        Set the review on a submission, replacing any earlier one.

        Raises:
            NotFound: If no submission has this id
        """
        with self.store.transaction(SUBMISSIONS_KEY):
            items = self.store.read_collection(SUBMISSIONS_KEY)
            for index, item in enumerate(items):
                if item.get("id") == submission_id:
                    submission = Submission.from_dict(item)
                    submission.review = review
                    items[index] = submission.to_dict()
                    self.store.write_collection(SUBMISSIONS_KEY, items)
                    break
            else:
                raise NotFound("Submission", submission_id)

        reviews_attached.inc()
        log_info(
            f"Review attached to {submission_id}",
            submission_id=submission_id,
            reviewer_id=review.reviewer_id,
            score=review.score,
        )
        return submission
