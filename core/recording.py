"""Bookkeeping for a candidate recording answers to an interview."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from core.ids import now_ms, uuid_id
from errors import ValidationFailed
from logger import log_debug
from models import Answer, Interview

NOT_RECORDED = "not_recorded"
RECORDING = "recording"
RECORDED = "recorded"


class AudioCapture(ABC):
    """Device audio capture. The returned uri is stored, never interpreted."""

    @abstractmethod
    def start_capture(self, question_index: int) -> Any:
        """Start capturing and return an opaque handle."""

    @abstractmethod
    def stop_capture(self, handle: Any) -> str:
        """Stop capturing and return the uri of the recording."""


class RecordingSession:
    """Tracks takes per question; a new take replaces the previous one."""

    def __init__(self, interview: Interview, capture: AudioCapture, clock: Callable[[], int] = now_ms):
        if not interview.is_recordable():
            raise ValidationFailed("This interview has no questions to answer")
        self.interview = interview
        self.capture = capture
        self.clock = clock
        self._takes: dict[int, Answer] = {}
        self._active: Optional[tuple[int, Any]] = None

    def start(self, q_index: int):
        """
        Begin recording an answer to question ``q_index``.

        Raises:
            ValidationFailed: If the index is out of range or a recording is in progress
        """
        if not 0 <= q_index < len(self.interview.questions):
            raise ValidationFailed(f"Question {q_index + 1} does not exist")
        if self._active is not None:
            raise ValidationFailed("Stop the current recording first")
        handle = self.capture.start_capture(q_index)
        self._active = (q_index, handle)
        log_debug(f"Recording started for question {q_index}", interview_id=self.interview.id)

    def stop(self) -> Optional[Answer]:
        """Finish the current recording. Returns None when nothing is being recorded."""
        if self._active is None:
            return None
        q_index, handle = self._active
        self._active = None
        uri = self.capture.stop_capture(handle)
        answer = Answer(id=uuid_id(), q_index=q_index, uri=uri, recorded_at=self.clock())
        self._takes[q_index] = answer
        log_debug(f"Recording stopped for question {q_index}", interview_id=self.interview.id)
        return answer

    def status(self, q_index: int) -> str:
        if self._active is not None and self._active[0] == q_index:
            return RECORDING
        return RECORDED if q_index in self._takes else NOT_RECORDED

    def answers(self) -> list[Answer]:
        """Latest take per question, in question order."""
        return [self._takes[i] for i in sorted(self._takes)]
