"""
Persistent session holder.

The session is written once at login/signup and read once at session start;
after that it is passed around explicitly as a ``Session`` value.
"""

from __future__ import annotations

import logging
from typing import Optional

from spacebook.content.models import Session
from spacebook.content.storage import KeyValueStore

logger = logging.getLogger(__name__)

USER_ID_KEY = "user_id"
SESSION_TOKEN_KEY = "session_token"


class NotAuthenticatedError(Exception):
    """Raised when an operation needs a session and none is persisted."""


class SessionStore:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load(self) -> Optional[Session]:
        """Return the persisted session, or None if absent or unreadable."""
        with self.store.transaction():
            raw_id = self.store.get(USER_ID_KEY)
            token = self.store.get(SESSION_TOKEN_KEY)
        if not raw_id or not token:
            return None
        try:
            user_id = int(raw_id)
        except ValueError:
            logger.warning("Ignoring stored user_id %r: not an integer", raw_id)
            return None
        return Session(user_id=user_id, session_token=token)

    def require(self) -> Session:
        session = self.load()
        if session is None:
            raise NotAuthenticatedError("Not logged in. Run: spacebook auth login")
        return session

    def authenticate(self, session: Session) -> Session:
        """Persist a freshly issued session."""
        with self.store.transaction():
            self.store.set(USER_ID_KEY, str(session.user_id))
            self.store.set(SESSION_TOKEN_KEY, session.session_token)
        logger.info("Stored session for user %s", session.user_id)
        return session

    def unauthenticate(self) -> None:
        with self.store.transaction():
            self.store.remove(USER_ID_KEY)
            self.store.remove(SESSION_TOKEN_KEY)
        logger.info("Cleared stored session")
