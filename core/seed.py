"""First-run seeding of the storage keys."""

from passlib.context import CryptContext

from auth import get_password_hash
from core.document_store import (
    DocumentStore, USERS_KEY, INTERVIEWS_KEY, SUBMISSIONS_KEY, TASKS_KEY, INTERVIEW_TASKS_KEY,
)
from logger import log_info
from models import Interview, User, ROLE_ADMIN, ROLE_CANDIDATE, ROLE_REVIEWER

DEFAULT_ACCOUNTS = [
    ("admin@test.com", "Admin User", ROLE_ADMIN, "admin123"),
    ("reviewer@test.com", "Reviewer User", ROLE_REVIEWER, "reviewer123"),
    ("candidate@test.com", "Candidate User", ROLE_CANDIDATE, "candidate123"),
]

SAMPLE_INTERVIEWS = [
    Interview(
        id="sample-frontend-developer",
        title="Frontend Developer Screening",
        description="Short technical screen covering JavaScript fundamentals and UI work.",
        questions=[
            "Walk us through a recent interface you built and the decisions behind it.",
            "How do you keep a large component tree fast when data changes often?",
            "Describe how you would make a form accessible to keyboard and screen reader users.",
        ],
    ),
    Interview(
        id="sample-behavioral",
        title="Behavioral Interview",
        description="General questions about teamwork, ownership and communication.",
        questions=[
            "Tell us about a time you disagreed with a teammate and how it was resolved.",
            "Describe a project that did not go as planned. What did you change afterwards?",
        ],
    ),
]


def init_storage(store: DocumentStore, password_context: CryptContext) -> list[str]:
    """
    Seed each storage key that is absent. Present keys are never touched.

    Returns:
        The keys that were seeded
    """
    seeded = []

    if not store.exists(USERS_KEY):
        users = [
            User(id=uid, name=name, role=role, password_hash=get_password_hash(password_context, pw))
            for uid, name, role, pw in DEFAULT_ACCOUNTS
        ]
        store.write_collection(USERS_KEY, [u.to_dict() for u in users])
        seeded.append(USERS_KEY)

    if not store.exists(INTERVIEWS_KEY):
        store.write_collection(INTERVIEWS_KEY, [i.to_dict() for i in SAMPLE_INTERVIEWS])
        seeded.append(INTERVIEWS_KEY)

    for key in (SUBMISSIONS_KEY, TASKS_KEY, INTERVIEW_TASKS_KEY):
        if not store.exists(key):
            store.write_collection(key, [])
            seeded.append(key)

    if seeded:
        log_info(f"Seeded storage keys: {', '.join(seeded)}", keys=seeded)
    return seeded
