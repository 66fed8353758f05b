from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from uuid import uuid4

from .scheduler import AsyncioScheduler, Clock, ScheduledJob, Scheduler, utcnow

logger = logging.getLogger(__name__)


DEFAULT_SESSION_TIMEOUT = timedelta(minutes=30)
DEFAULT_CLEANUP_INTERVAL = timedelta(minutes=5)


@dataclass
class Session:
    id: str
    created_at: datetime
    last_accessed_at: datetime
    data: Dict[str, Any] = field(default_factory=dict)


class SessionStore:
    """In-memory sessions with a sliding inactivity timeout.

    A session expires once ``now - last_accessed_at`` exceeds ``timeout``.
    Every successful lookup refreshes ``last_accessed_at``. Expired entries are
    evicted lazily by :meth:`get_session` and in bulk by :meth:`cleanup`, which
    also runs every ``cleanup_interval`` between :meth:`start` and :meth:`stop`.
    """

    def __init__(
        self,
        timeout: timedelta = DEFAULT_SESSION_TIMEOUT,
        *,
        cleanup_interval: timedelta = DEFAULT_CLEANUP_INTERVAL,
        clock: Clock = utcnow,
        scheduler: Optional[Scheduler] = None,
    ):
        self.timeout = timeout
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._scheduler = scheduler or AsyncioScheduler()
        self._sessions: Dict[str, Session] = {}
        self._cleanup_job: Optional[ScheduledJob] = None

    @classmethod
    def from_minutes(cls, timeout_minutes: float, **kwargs) -> "SessionStore":
        return cls(timedelta(minutes=timeout_minutes), **kwargs)

    # Lifecycle ---------------------------------------------------------------

    def start(self) -> None:
        if self._cleanup_job is not None:
            return
        self._cleanup_job = self._scheduler.call_every(
            self.cleanup_interval.total_seconds(), self._scheduled_cleanup
        )
        logger.debug(
            f"Session cleanup scheduled every {self.cleanup_interval.total_seconds():.0f}s"
        )

    def stop(self) -> None:
        if self._cleanup_job is None:
            return
        self._cleanup_job.cancel()
        self._cleanup_job = None
        logger.debug("Session cleanup stopped")

    async def aclose(self) -> None:
        """Stop the sweep and wait for its task to finish."""
        job = self._cleanup_job
        self.stop()
        if job is not None:
            await job.wait()

    @property
    def running(self) -> bool:
        return self._cleanup_job is not None

    # Sessions ----------------------------------------------------------------

    def create_session(self) -> Session:
        now = self._clock()
        session = Session(id=str(uuid4()), created_at=now, last_accessed_at=now)
        self._sessions[session.id] = session
        logger.debug(f"Created session {session.id}")
        return session

    def get_or_create_session(self, session_id: Optional[str] = None) -> Session:
        if session_id:
            session = self.get_session(session_id)
            if session is not None:
                return session
        return self.create_session()

    def get_session(self, session_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._is_expired(session):
            del self._sessions[session_id]
            logger.debug(f"Evicted expired session {session_id} on lookup")
            return None
        session.last_accessed_at = self._clock()
        return session

    def delete_session(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def cleanup(self) -> int:
        expired = [sid for sid, s in self._sessions.items() if self._is_expired(s)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info(f"Cleaned up {len(expired)} expired session(s)")
        return len(expired)

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def _scheduled_cleanup(self) -> None:
        if self._cleanup_job is None:
            return
        self.cleanup()

    def _is_expired(self, session: Session) -> bool:
        return self._clock() - session.last_accessed_at > self.timeout
