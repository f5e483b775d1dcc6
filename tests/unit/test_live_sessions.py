from __future__ import annotations

from datetime import datetime, timedelta, timezone

from shared.common.models import Content
from shared.state.live_sessions import LiveSessionManager


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


def test_idle_sessions_are_cleaned_up() -> None:
    clock = FakeClock()
    manager = LiveSessionManager(clock)
    stale = manager.open()
    fresh = manager.open()

    clock.now += timedelta(minutes=20)
    manager.touch(fresh)
    clock.now += timedelta(minutes=15)

    assert manager.cleanup_inactive() == 1
    stats = manager.stats()
    assert stats["activeSessions"] == 1
    assert stats["totalSessions"] == 2
    assert stale.id != fresh.id


def test_modalities_come_from_setup_config() -> None:
    session = LiveSessionManager().open()
    assert session.modalities == ["TEXT", "AUDIO"]

    session.config = {"generationConfig": {"responseModalities": ["TEXT"]}}

    assert session.modalities == ["TEXT"]


def test_history_is_capped_at_the_last_ten_turns() -> None:
    session = LiveSessionManager().open()

    session.remember([Content.model_validate({"role": "user", "parts": [{"text": str(i)}]}) for i in range(15)])

    assert [turn.parts[0].text for turn in session.recent_turns()] == [str(i) for i in range(5, 15)]
    assert len(session.history) == 10


def test_close_removes_session() -> None:
    manager = LiveSessionManager()
    session = manager.open()

    manager.close(session.id)

    assert manager.stats()["activeSessions"] == 0
