"""Tests for RecordingSession."""

import pytest

from core.recording import AudioCapture, RecordingSession, NOT_RECORDED, RECORDED, RECORDING
from errors import ValidationFailed
from models import Interview


class FakeCapture(AudioCapture):
    """Hands out sequential uris instead of touching a microphone."""

    def __init__(self):
        self.started = []
        self.count = 0

    def start_capture(self, question_index):
        self.started.append(question_index)
        return {"q": question_index}

    def stop_capture(self, handle):
        self.count += 1
        return f"file:///rec-{handle['q']}-{self.count}.m4a"


@pytest.fixture
def interview():
    return Interview(id="i1", title="T", questions=["Q1", "Q2", "Q3"])


class TestRecordingSession:

    def test_record_one_answer(self, interview, clock):
        """Start then stop yields an answer for that question."""
        session = RecordingSession(interview, FakeCapture(), clock=clock)
        session.start(1)
        assert session.status(1) == RECORDING
        answer = session.stop()

        assert answer.q_index == 1
        assert answer.uri == "file:///rec-1-1.m4a"
        assert answer.recorded_at == clock.now
        assert session.status(1) == RECORDED
        assert session.status(0) == NOT_RECORDED

    def test_stop_when_idle_returns_none(self, interview):
        """Stopping with nothing recording returns None."""
        session = RecordingSession(interview, FakeCapture())
        assert session.stop() is None

    def test_retake_replaces_previous_answer(self, interview):
        """Only the latest take per question is kept."""
        session = RecordingSession(interview, FakeCapture())
        session.start(2)
        session.stop()
        session.start(0)
        session.stop()
        session.start(2)
        session.stop()

        answers = session.answers()
        assert [a.q_index for a in answers] == [0, 2]
        assert answers[1].uri == "file:///rec-2-3.m4a"

    @pytest.mark.parametrize("index", [-1, 3])
    def test_out_of_range_question(self, interview, index):
        """Questions outside the interview cannot be recorded."""
        capture = FakeCapture()
        session = RecordingSession(interview, capture)
        with pytest.raises(ValidationFailed):
            session.start(index)
        assert capture.started == []

    def test_one_recording_at_a_time(self, interview):
        """A second start while recording is rejected."""
        session = RecordingSession(interview, FakeCapture())
        session.start(0)
        with pytest.raises(ValidationFailed):
            session.start(1)

    def test_interview_without_questions(self):
        """Sessions need at least one question."""
        with pytest.raises(ValidationFailed):
            RecordingSession(Interview(id="i", title="Empty"), FakeCapture())
