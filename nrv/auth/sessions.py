"""
In-memory session store.

Sessions are opaque random tokens mapped to a username and an absolute
expiry. They live only in this process: a restart signs everyone out.

There is no background sweeper. An expired session is removed the first
time it is looked up.
"""

import logging
import secrets
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

# 32 random bytes, URL-safe base64 (43 characters)
TOKEN_BYTES = 32
DEFAULT_SESSION_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class Session:
    """An authenticated session."""
    token: str
    username: str
    expires_at: float  # Epoch seconds

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now

    @property
    def expires_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at, tz=timezone.utc)

    def __repr__(self) -> str:
        return f"Session(username={self.username!r}, expires_at={self.expires_at})"


class SessionStore:
    """
    Thread-safe token -> Session mapping.

    Every operation runs under a single lock, including the
    check-and-delete done when a lookup finds an expired session.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize session store.

        Args:
            ttl_seconds: Default session lifetime
            clock: Time source returning epoch seconds
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, username: str, ttl: Optional[int] = None) -> Session:
        """
        Create a new session.

        Args:
            username: Identity the session authenticates
            ttl: Lifetime in seconds (default: store TTL)

        Returns:
            New Session object
        """
        lifetime = self.ttl_seconds if ttl is None else ttl

        with self._lock:
            token = secrets.token_urlsafe(TOKEN_BYTES)
            while token in self._sessions:
                token = secrets.token_urlsafe(TOKEN_BYTES)

            session = Session(
                token=token,
                username=username,
                expires_at=self._clock() + lifetime
            )
            self._sessions[token] = session

        logger.info(f"Created session for {username}, expires in {lifetime}s")
        return session

    def lookup(self, token: str) -> Optional[Session]:
        """
        Get a session by token.

        Args:
            token: Session token

        Returns:
            Session if present and not expired, None otherwise
        """
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None

            if session.is_expired(self._clock()):
                del self._sessions[token]
                expired = session
            else:
                return session

        logger.info(f"Session expired for {expired.username}")
        return None

    def revoke(self, token: str) -> Optional[Session]:
        """
        Remove a session.

        Args:
            token: Session token

        Returns:
            The removed session if it was still live, None otherwise
        """
        with self._lock:
            session = self._sessions.pop(token, None)
            now = self._clock()

        if session is None or session.is_expired(now):
            return None

        logger.info(f"Session revoked for {session.username}")
        return session

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._sessions
