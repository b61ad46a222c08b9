"""SessionStore: in-memory conversation sessions with retention.

Sessions are created on the first message for a session key. Sessions idle
longer than the timeout are removed by sweep_expired(), and creating a
session past max_sessions evicts the least recently active one.
"""

import asyncio
import logging
from datetime import timedelta

from baton_server.errors import SessionNotFoundError
from baton_server.sessions.types import Session
from baton_server.workflows.types import utcnow

logger = logging.getLogger(__name__)


class SessionStore:
    """Lock-guarded map of session id to Session."""

    def __init__(self, timeout_seconds: float = 3600.0, max_sessions: int = 100) -> None:
        """Initialize the store.

        Args:
            timeout_seconds: Idle time after which a session expires
            max_sessions: Maximum number of sessions held at once
        """
        self.timeout_seconds = timeout_seconds
        self.max_sessions = max_sessions
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()

    async def get_or_create(self, session_id: str) -> Session:
        """Return the session for a key, creating it if needed.

        A cancelled session is replaced by a fresh one.
        """
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is not None and not session.cancelled:
                return session

            if len(self._sessions) >= self.max_sessions and session_id not in self._sessions:
                oldest = min(self._sessions.values(), key=lambda s: s.last_activity_at)
                del self._sessions[oldest.session_id]
                logger.info(f"Evicted least recently active session {oldest.session_id}")

            session = Session(session_id=session_id)
            self._sessions[session_id] = session
            logger.info(f"Created session {session_id}")
            return session

    def get(self, session_id: str) -> Session:
        """Look up a session.

        Raises:
            SessionNotFoundError: If no session has that id
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def list(self) -> list[Session]:
        """All sessions, most recently active first."""
        return sorted(
            self._sessions.values(), key=lambda s: s.last_activity_at, reverse=True
        )

    async def remove(self, session_id: str) -> Session:
        """Remove a session and mark it cancelled.

        Raises:
            SessionNotFoundError: If no session has that id
        """
        async with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        session.cancelled = True
        logger.info(f"Removed session {session_id}")
        return session

    async def sweep_expired(self) -> int:
        """Remove sessions idle longer than the timeout.

        Returns:
            int: Number of sessions removed
        """
        cutoff = utcnow() - timedelta(seconds=self.timeout_seconds)
        async with self._lock:
            expired = [
                session_id
                for session_id, session in self._sessions.items()
                if session.last_activity_at < cutoff
            ]
            for session_id in expired:
                del self._sessions[session_id]

        if expired:
            logger.info(f"Swept {len(expired)} expired sessions")
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)
