"""
Session identity

A user id that lives as long as the session store, and a session id that is
replaced every time a quiz starts. The agents key their conversation state
by the pair.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from .config import config

logger = logging.getLogger(__name__)


def random_token() -> str:
    """Random unique token (uuid4, drawn from os.urandom)."""
    return str(uuid.uuid4())


class SessionStore(ABC):
    """Session-scoped key/value storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass


class MemorySessionStore(SessionStore):
    """Storage that lasts for the life of the process."""

    def __init__(self):
        self._values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class SessionIdentity:
    """
    Identifiers attached to every agent call.

    ``user_id`` is created once and persisted in the store; ``session_id``
    is regenerated for each quiz attempt.
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        token_factory: Callable[[], str] = random_token,
        key: Optional[str] = None,
    ):
        self.store = store or MemorySessionStore()
        self.token_factory = token_factory
        self.key = key or config.quiz.user_id_key
        self.session_id = ""

    def ensure_user_id(self) -> str:
        """Return the stored user id, creating and persisting one if needed."""
        stored = self.store.get(self.key)
        if stored:
            return stored

        user_id = f"user-{self.token_factory()}"
        self.store.set(self.key, user_id)
        logger.debug(f"Created user id {user_id}")
        return user_id

    def new_session_id(self) -> str:
        """Allocate a fresh session id for a new quiz attempt."""
        self.session_id = self.token_factory()
        return self.session_id

    def context(self) -> Dict[str, str]:
        """Correlation context for agent calls."""
        return {"user_id": self.ensure_user_id(), "session_id": self.session_id}
