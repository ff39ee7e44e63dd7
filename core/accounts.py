"""User accounts persisted under ``USERS_v1``."""

from typing import Optional

from passlib.context import CryptContext

from auth import build_password_context, get_password_hash, verify_password
from core.document_store import DocumentStore, USERS_KEY
from errors import DuplicateId, NotFound
from logger import log_info, log_warning
from models import User


class AccountDirectory:
    """Registers and authenticates users."""

    def __init__(self, store: DocumentStore, password_context: CryptContext = None):
        self.store = store
        self.password_context = password_context or build_password_context()

    def list_users(self) -> list[User]:
        """All users in registration order."""
        return [User.from_dict(u) for u in self.store.read_collection(USERS_KEY)]

    def get(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        for user in self.list_users():
            if user.id == user_id:
                return user
        return None

    def list_by_role(self, role: str) -> list[User]:
        return [u for u in self.list_users() if u.role == role]

    def register(self, user_id: str, name: str, role: str, password: str) -> User:
        """
        Create a new user.

        Raises:
            DuplicateId: If a user with the same id already exists
        """
        with self.store.transaction(USERS_KEY):
            users = self.store.read_collection(USERS_KEY)
            if any(u.get("id") == user_id for u in users):
                log_warning(f"Registration rejected, id taken: {user_id}", user_id=user_id)
                raise DuplicateId("User", user_id)

            user = User(
                id=user_id,
                name=name,
                role=role,
                password_hash=get_password_hash(self.password_context, password),
            )
            users.append(user.to_dict())
            self.store.write_collection(USERS_KEY, users)

        log_info(f"User registered: {user_id}", user_id=user_id, role=role)
        return user

    def authenticate(self, user_id: str, password: str) -> User:
        """
        Authenticate user with id and password.

        Raises:
            NotFound: If no user matches both id and password
        """
        user = self.get(user_id)
        if user is None or not verify_password(self.password_context, password, user.password_hash):
            log_warning(f"Authentication failed: {user_id}", user_id=user_id)
            raise NotFound("Account", user_id)
        log_info(f"Authenticated: {user_id}", user_id=user_id)
        return user
