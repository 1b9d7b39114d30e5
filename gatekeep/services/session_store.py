"""Server-side web sessions.

The browser only ever holds an opaque session id (the SESSION cookie).
Everything else (the security context, authorized clients) lives in the
session's attribute map on the server, keyed by that id.

Sessions expire after ``ttl_seconds`` of inactivity.  Expired sessions
are evicted lazily: on the next ``get`` for that id, on every ``save``,
and on ``purge_expired``.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WebSession:
    id: str
    created_at: float
    last_accessed_at: float
    attributes: dict[str, Any] = field(default_factory=dict)
    invalidated: bool = False

    def invalidate(self) -> None:
        self.attributes.clear()
        self.invalidated = True


@runtime_checkable
class SessionStore(Protocol):
    def create(self) -> WebSession:
        """Return a new, not yet persisted session."""
        ...

    def get(self, session_id: str) -> WebSession | None:
        """Fetch a live session and refresh its last-access time."""
        ...

    def save(self, session: WebSession) -> None: ...

    def delete(self, session_id: str) -> None: ...


class InMemorySessionStore:
    """Per-process session store.

    Sessions are shared between the request-handling thread and whoever
    created the store, so all access goes through one lock.
    """

    def __init__(
        self,
        ttl_seconds: int = 1800,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive (got {ttl_seconds})")
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: dict[str, WebSession] = {}

    def create(self) -> WebSession:
        now = self._clock()
        return WebSession(
            id=secrets.token_urlsafe(32), created_at=now, last_accessed_at=now
        )

    def get(self, session_id: str) -> WebSession | None:
        now = self._clock()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if now - session.last_accessed_at > self._ttl:
                del self._sessions[session_id]
                logger.debug("Session expired id=%s…", session_id[:8])
                return None
            session.last_accessed_at = now
            return session

    def save(self, session: WebSession) -> None:
        if session.invalidated:
            raise ValueError("cannot save an invalidated session")
        with self._lock:
            self._evict_expired(self._clock())
            self._sessions[session.id] = session

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def purge_expired(self) -> int:
        """Drop every expired session. Returns how many were removed."""
        with self._lock:
            return self._evict_expired(self._clock())

    def _evict_expired(self, now: float) -> int:
        # Caller holds self._lock.
        expired = [
            sid
            for sid, s in self._sessions.items()
            if now - s.last_accessed_at > self._ttl
        ]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
