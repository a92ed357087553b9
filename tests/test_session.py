"""
Session Tests
=============

Ownership, serialization, and the decision log.
"""

import threading

import pytest

from surfacing_engine.engine import SurfacingThresholds
from surfacing_engine.errors import SessionNotFound
from surfacing_engine.models.decision import Decision
from surfacing_engine.session import MissionSession, SessionRegistry


@pytest.fixture
def session(asset_context):
    return MissionSession(
        "mission-1",
        thresholds=SurfacingThresholds(eviction_interval_events=0),
        context=asset_context,
        decision_log_size=5,
    )


class TestMissionSession:
    """Tests for a single mission session."""

    def test_submit_uses_session_context(self, session, make_event):
        result = session.submit(make_event(label="chemical", score=0.86))
        assert result.decision == Decision.SURFACE

    def test_update_context_applies_to_next_event(self, session, make_event):
        session.update_context(None)
        result = session.submit(make_event(label="chemical", score=0.86))
        assert result.decision == Decision.RECORD

    def test_surfaced_and_recorded(self, session, make_event):
        session.submit(make_event(label="chemical", score=0.86, ts=0))
        session.submit(make_event(label="car", score=0.99, ts=1000))
        session.submit({"label": "fire"})

        assert [r.decision for r in session.surfaced()] == [Decision.SURFACE]
        assert [r.decision for r in session.recorded()] == [Decision.RECORD]
        assert len(session.decisions()) == 3

    def test_decision_log_is_bounded(self, session, make_event):
        for i in range(8):
            session.submit(make_event(label="car", score=0.5, ts=i * 1000))

        log = session.decisions()
        assert len(log) == 5
        assert log[0].timestamp == 3000

    def test_peek_leaves_log_untouched(self, session, make_event):
        session.peek(make_event(label="chemical", score=0.86))
        assert session.decisions() == []
        assert session.engine.state.events_processed == 0

    def test_reset(self, session, make_event):
        session.submit(make_event(label="chemical", score=0.86))
        session.reset()

        assert session.decisions() == []
        assert session.engine.state.cell_history == {}
        assert session.metrics()["decisions"]["surface"] == 0

    def test_metrics(self, session, make_event):
        session.submit(make_event(label="chemical", score=0.86, ts=0))
        session.submit(make_event(label="car", score=0.99, ts=1000))

        metrics = session.metrics()
        assert metrics["mission_id"] == "mission-1"
        assert metrics["decisions"] == {
            "ignore": 0, "record": 1, "surface": 1, "auto-dispatch": 0,
        }
        assert metrics["events_processed"] == 2

    def test_rejects_empty_log(self):
        with pytest.raises(ValueError):
            MissionSession("m", decision_log_size=0)

    def test_concurrent_submissions_are_serialized(self, make_event):
        session = MissionSession("busy", decision_log_size=1000)
        per_thread = 50

        def feed(offset):
            for i in range(per_thread):
                session.submit(make_event(label="car", score=0.5, ts=offset + i))

        threads = [threading.Thread(target=feed, args=(n * 10_000,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert session.engine.state.events_processed == 4 * per_thread
        assert session.metrics()["decisions"]["record"] == 4 * per_thread


class TestSessionRegistry:
    """Tests for mission lookup."""

    def test_open_is_idempotent(self):
        registry = SessionRegistry()
        first = registry.open("m-1")
        assert registry.open("m-1") is first
        assert len(registry) == 1
        assert "m-1" in registry

    def test_open_with_context_updates_existing(self, asset_context):
        registry = SessionRegistry()
        registry.open("m-1")
        session = registry.open("m-1", context=asset_context)
        assert len(session.context.critical_assets) == 1

    def test_get_unknown(self):
        with pytest.raises(SessionNotFound):
            SessionRegistry().get("missing")

    def test_close(self):
        registry = SessionRegistry()
        registry.open("m-1")
        registry.close("m-1")

        assert "m-1" not in registry
        with pytest.raises(SessionNotFound):
            registry.close("m-1")

    def test_sessions_are_isolated(self, make_event):
        registry = SessionRegistry()
        registry.open("a").submit(make_event(score=0.90, ts=0))
        result = registry.open("b").submit(make_event(score=0.90, ts=1000))

        assert result.decision == Decision.RECORD

    def test_metrics(self, make_event):
        registry = SessionRegistry()
        registry.open("a").submit(make_event())

        metrics = registry.metrics()
        assert metrics["sessions"] == 1
        assert metrics["missions"]["a"]["events_processed"] == 1
