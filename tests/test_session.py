"""
Tests for session identity.
"""

import itertools

from nichenerd.session import SessionIdentity, MemorySessionStore, random_token


def counter_tokens():
    numbers = itertools.count(1)
    return lambda: f"t{next(numbers)}"


class TestSessionIdentity:
    """Tests for user and session ids."""

    def test_user_id_created_once(self):
        """Test the user id is generated on first use and then reused."""
        store = MemorySessionStore()
        identity = SessionIdentity(store=store, token_factory=counter_tokens())

        first = identity.ensure_user_id()
        second = identity.ensure_user_id()

        assert first == "user-t1"
        assert second == first
        assert store.get("nichenerd_user_id") == "user-t1"

    def test_user_id_survives_new_identity(self):
        """Test a stored id is picked up by a new identity on the same store."""
        store = MemorySessionStore()
        SessionIdentity(store=store).ensure_user_id()

        assert SessionIdentity(store=store).ensure_user_id() == store.get("nichenerd_user_id")

    def test_existing_id_is_respected(self):
        store = MemorySessionStore()
        store.set("nichenerd_user_id", "user-from-earlier")

        assert SessionIdentity(store=store).ensure_user_id() == "user-from-earlier"

    def test_custom_key(self):
        store = MemorySessionStore()
        SessionIdentity(store=store, key="other_key").ensure_user_id()

        assert store.get("other_key").startswith("user-")
        assert store.get("nichenerd_user_id") is None

    def test_new_session_ids_differ(self):
        identity = SessionIdentity()

        first = identity.new_session_id()
        second = identity.new_session_id()

        assert first != second
        assert identity.session_id == second

    def test_context(self):
        identity = SessionIdentity(token_factory=counter_tokens())
        identity.new_session_id()

        assert identity.context() == {"user_id": "user-t2", "session_id": "t1"}

    def test_random_token_is_unique(self):
        tokens = {random_token() for _ in range(50)}

        assert len(tokens) == 50
