"""In-memory session store.

A session groups the messages of one interview under a session id. The
store is the single owner of sessions: callers fetch, mutate under the
session's lock, and hand the session back through ``update``. Swap in
another implementation with the same methods to move sessions into an
external cache or database.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

logger = logging.getLogger(__name__)

ACTIVE = "active"
COMPLETED = "completed"


@dataclass(frozen=True)
class Message:
    role: str
    content: str
    timestamp: datetime


@dataclass
class Session:
    id: str
    start_time: datetime
    messages: list = field(default_factory=list)
    status: str = ACTIVE
    end_time: Optional[datetime] = None
    summary: Optional[str] = None
    last_activity: Optional[datetime] = None

    @property
    def turn_count(self):
        return sum(1 for m in self.messages if m.role == "user")

    def user_messages(self):
        return [m for m in self.messages if m.role == "user"]

    def add_message(self, role, content, timestamp):
        message = Message(role=role, content=content, timestamp=timestamp)
        self.messages.append(message)
        self.last_activity = timestamp
        return message

    def complete(self, summary, now):
        """Record the diary; only the first call ends the session."""
        self.summary = summary
        self.last_activity = now
        if self.status != COMPLETED:
            self.status = COMPLETED
            self.end_time = now


class SessionStore:
    def __init__(self, ttl_seconds=None):
        self._sessions = {}
        self._locks = {}
        self._guard = threading.Lock()
        self._ttl = timedelta(seconds=ttl_seconds) if ttl_seconds else None
        self._timer = None

    def create(self, now):
        session = Session(id=uuid.uuid4().hex, start_time=now, last_activity=now)
        with self._guard:
            self._sessions[session.id] = session
            self._locks[session.id] = threading.Lock()
        return session

    def get(self, session_id):
        with self._guard:
            return self._sessions.get(session_id)

    def update(self, session):
        with self._guard:
            self._sessions[session.id] = session

    def list(self):
        with self._guard:
            return list(self._sessions.values())

    def lock(self, session_id):
        """Per-session lock; hold it across any read-modify-write of a session.

        Raises KeyError for unknown ids.
        """
        with self._guard:
            return self._locks[session_id]

    def __len__(self):
        with self._guard:
            return len(self._sessions)

    def evict_expired(self, now):
        """Drop sessions idle for longer than the TTL. Returns evicted ids."""
        if self._ttl is None:
            return []
        cutoff = now - self._ttl
        with self._guard:
            expired = [
                sid for sid, s in self._sessions.items()
                if (s.last_activity or s.start_time) < cutoff
            ]
            for sid in expired:
                del self._sessions[sid]
                self._locks.pop(sid, None)
        if expired:
            logger.info("Evicted %d idle session(s)", len(expired))
        return expired

    def start_sweeper(self, interval, clock=datetime.now):
        """Run evict_expired every ``interval`` seconds on a daemon timer."""
        if self._ttl is None or interval <= 0:
            return
        self._schedule_sweep(interval, clock)

    def stop_sweeper(self):
        """Cancel the timer for clean shutdown."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule_sweep(self, interval, clock):
        self._timer = threading.Timer(interval, self._sweep, args=(interval, clock))
        self._timer.daemon = True
        self._timer.start()

    def _sweep(self, interval, clock):
        # Reschedule first so the loop survives a failed sweep
        self._schedule_sweep(interval, clock)
        try:
            self.evict_expired(clock())
        except Exception:
            logger.exception("Session sweep failed")
