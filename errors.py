"""Error taxonomy for the interview task store."""


class InterviewTasksError(Exception):
    """Base class for failures surfaced to callers as a single notice."""

    title = "Error"


class NotFound(InterviewTasksError):
    """A referenced record does not exist."""

    title = "Not Found"

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class DuplicateId(InterviewTasksError):
    """A record with the same id already exists."""

    title = "Already Exists"

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} already exists: {record_id}")


class ValidationFailed(InterviewTasksError):
    """Caller-side field checks rejected the input."""

    title = "Validation Error"


class StorageFailure(InterviewTasksError):
    """The key-value store rejected a read or write."""

    title = "Storage Error"
