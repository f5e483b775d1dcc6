from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from shared.common.ids import SequentialIds
from shared.common.models import Content
from shared.common.serialization import utc_now


DEFAULT_MAX_IDLE_SECONDS = 1800.0
HISTORY_WINDOW = 10


@dataclass(slots=True)
class LiveSession:
    id: str
    created_at: datetime
    last_activity: datetime
    config: dict[str, Any] = field(default_factory=dict)
    history: deque[Content] = field(default_factory=lambda: deque(maxlen=HISTORY_WINDOW))

    @property
    def modalities(self) -> list[str]:
        generation = self.config.get("generationConfig") or self.config.get("generation_config") or {}
        return list(generation.get("responseModalities") or ["TEXT", "AUDIO"])

    def remember(self, turns: Iterable[Content]) -> None:
        self.history.extend(turns)

    def recent_turns(self) -> list[Content]:
        return list(self.history)


class LiveSessionManager:
    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._ids = SequentialIds("live-session")
        self._sessions: dict[str, LiveSession] = {}
        self._total = 0
        self._lock = threading.Lock()

    def open(self) -> LiveSession:
        now = self._clock()
        session = LiveSession(id=self._ids.next(), created_at=now, last_activity=now)
        with self._lock:
            self._sessions[session.id] = session
            self._total += 1
        return session

    def touch(self, session: LiveSession) -> None:
        session.last_activity = self._clock()

    def close(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def cleanup_inactive(self, max_idle_seconds: float = DEFAULT_MAX_IDLE_SECONDS) -> int:
        now = self._clock()
        with self._lock:
            idle = [
                session_id
                for session_id, session in self._sessions.items()
                if (now - session.last_activity).total_seconds() > max_idle_seconds
            ]
            for session_id in idle:
                del self._sessions[session_id]
        return len(idle)

    def stats(self) -> dict[str, Any]:
        now = self._clock()
        with self._lock:
            durations = [(now - session.created_at).total_seconds() for session in self._sessions.values()]
            return {
                "activeSessions": len(durations),
                "totalSessions": self._total,
                "avgSessionDuration": round(sum(durations) / len(durations), 2) if durations else 0,
            }
