"""Interview templates persisted under ``INTERVIEWS_v1``."""

from typing import List, Optional

from core.document_store import DocumentStore, INTERVIEWS_KEY
from core.ids import uuid_id
from errors import DuplicateId, NotFound
from logger import log_info
from models import Interview


class InterviewCatalog:
    """CRUD over interview templates. Question order is kept verbatim."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def list(self) -> List[Interview]:
        return [Interview.from_dict(i) for i in self.store.read_collection(INTERVIEWS_KEY)]

    def get(self, interview_id: str) -> Optional[Interview]:
        """Get interview by ID."""
        for interview in self.list():
            if interview.id == interview_id:
                return interview
        return None

    def save_all(self, interviews: List[Interview]):
        """Replace the whole catalog."""
        with self.store.transaction(INTERVIEWS_KEY):
            self.store.write_collection(INTERVIEWS_KEY, [i.to_dict() for i in interviews])

    def create(self, interview: Interview) -> List[Interview]:
        """
        Append an interview, assigning an id when it has none.

        Returns:
            The full catalog after the insert

        Raises:
            DuplicateId: If the interview's id is already in the catalog
        """
        if not interview.id:
            interview.id = uuid_id()

        with self.store.transaction(INTERVIEWS_KEY):
            items = self.store.read_collection(INTERVIEWS_KEY)
            if any(i.get("id") == interview.id for i in items):
                raise DuplicateId("Interview", interview.id)
            items.append(interview.to_dict())
            self.store.write_collection(INTERVIEWS_KEY, items)

        log_info(f"Interview created: {interview.title}", interview_id=interview.id)
        return [Interview.from_dict(i) for i in items]

    def update(self, interview_id: str, title: str = None, description: str = None,
               questions: List[str] = None) -> Interview:
        """
        Replace the given fields of an interview in place.

        Raises:
            NotFound: If no interview has this id
        """
        with self.store.transaction(INTERVIEWS_KEY):
            items = self.store.read_collection(INTERVIEWS_KEY)
            for index, item in enumerate(items):
                if item.get("id") != interview_id:
                    continue
                interview = Interview.from_dict(item)
                if title is not None:
                    interview.title = title
                if description is not None:
                    interview.description = description
                if questions is not None:
                    interview.questions = list(questions)
                items[index] = interview.to_dict()
                self.store.write_collection(INTERVIEWS_KEY, items)
                break
            else:
                raise NotFound("Interview", interview_id)

        log_info(f"Interview updated: {interview.title}", interview_id=interview_id)
        return interview

    def delete(self, interview_id: str) -> List[Interview]:
        """
        Remove an interview. Absent ids leave the catalog untouched.

        Returns:
            The full catalog after the removal
        """
        with self.store.transaction(INTERVIEWS_KEY):
            items = self.store.read_collection(INTERVIEWS_KEY)
            remaining = [i for i in items if i.get("id") != interview_id]
            if len(remaining) != len(items):
                self.store.write_collection(INTERVIEWS_KEY, remaining)
                log_info(f"Interview deleted: {interview_id}", interview_id=interview_id)

        return [Interview.from_dict(i) for i in remaining]
