"""Tests for AccountDirectory."""

import pytest

from core.document_store import USERS_KEY
from errors import DuplicateId, NotFound
from models import ROLE_CANDIDATE, ROLE_REVIEWER


class TestAccountDirectory:
    """Registration and authentication."""

    def test_empty_directory(self, accounts):
        """No users before anything is registered."""
        assert accounts.list_users() == []

    def test_register_appends_in_order(self, accounts):
        """Users are listed in registration order."""
        accounts.register("a@x.com", "A", ROLE_CANDIDATE, "pw-a")
        accounts.register("b@x.com", "B", ROLE_REVIEWER, "pw-b")
        assert [u.id for u in accounts.list_users()] == ["a@x.com", "b@x.com"]

    def test_password_is_never_stored_in_plaintext(self, accounts, store):
        """Only a password hash reaches storage."""
        accounts.register("a@x.com", "A", ROLE_CANDIDATE, "secret-pw")
        raw = store.read_collection(USERS_KEY)[0]
        assert "password" not in raw
        assert raw["passwordHash"] != "secret-pw"

    def test_duplicate_id_rejected_and_original_kept(self, accounts):
        """A second registration under the same id fails and changes nothing."""
        accounts.register("a@x.com", "Original", ROLE_CANDIDATE, "first")
        with pytest.raises(DuplicateId):
            accounts.register("a@x.com", "Impostor", ROLE_REVIEWER, "second")

        users = accounts.list_users()
        assert len(users) == 1
        assert users[0].name == "Original"
        assert accounts.authenticate("a@x.com", "first").name == "Original"
        with pytest.raises(NotFound):
            accounts.authenticate("a@x.com", "second")

    def test_authenticate_exact_match(self, accounts):
        """Matching id and password return the stored user."""
        accounts.register("a@x.com", "A", ROLE_CANDIDATE, "pw")
        user = accounts.authenticate("a@x.com", "pw")
        assert user.id == "a@x.com"
        assert user.role == ROLE_CANDIDATE

    @pytest.mark.parametrize("user_id,password", [
        ("a@x.com", "PW"),
        ("a@x.com", "pw "),
        ("A@x.com", "pw"),
        ("nobody@x.com", "pw"),
    ])
    def test_authenticate_rejects_mismatch(self, accounts, user_id, password):
        """Id and password must match exactly, case included."""
        accounts.register("a@x.com", "A", ROLE_CANDIDATE, "pw")
        with pytest.raises(NotFound):
            accounts.authenticate(user_id, password)

    def test_record_without_hash_never_authenticates(self, accounts, store):
        """A stored user without a hash cannot log in."""
        store.write_collection(USERS_KEY, [{"id": "legacy@x.com", "name": "L", "role": "admin"}])
        with pytest.raises(NotFound):
            accounts.authenticate("legacy@x.com", "")

    def test_get_and_list_by_role(self, accounts):
        """Lookup by id and filtering by role."""
        accounts.register("c@x.com", "C", ROLE_CANDIDATE, "pw")
        accounts.register("r@x.com", "R", ROLE_REVIEWER, "pw")
        assert accounts.get("r@x.com").name == "R"
        assert accounts.get("missing") is None
        assert [u.id for u in accounts.list_by_role(ROLE_CANDIDATE)] == ["c@x.com"]

    def test_corrupt_user_document_reads_as_empty(self, accounts, kv):
        """A user array with non-record items is treated as no users at all."""
        kv.set_item(USERS_KEY, "[1, null]")
        assert accounts.list_users() == []
        with pytest.raises(NotFound):
            accounts.authenticate("a@x.com", "pw")
