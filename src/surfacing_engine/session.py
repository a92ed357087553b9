"""
Mission Sessions
================

Explicit ownership of engine state.

One MissionSession owns one SignificanceEngine for the lifetime of a
mission. Events from several sources (e.g. multiple video streams) are
serialized through the session's lock, so the engine always sees one
logical sequence of calls.

Design Rules:
    - One engine per mission, never cloned or rebuilt mid-session
    - All engine calls go through the session lock
    - The decision log is bounded (drops oldest on overflow)
    - Context may be replaced at any time; the engine does not cache it

Example:
    registry = SessionRegistry()
    session = registry.open("mission-7")
    session.update_context(context)

    result = session.submit(event)
    if result.decision.is_alert:
        banner(result)
"""

import logging
import threading
from collections import Counter, deque
from typing import Any, Deque, Dict, List, Optional

from surfacing_engine.engine import SignificanceEngine, SurfacingThresholds
from surfacing_engine.engine.significance import ContextLike, EventLike, coerce_context
from surfacing_engine.errors import SessionNotFound
from surfacing_engine.models.decision import Decision, DecisionResult
from surfacing_engine.models.geometry import SurfacingContext


logger = logging.getLogger(__name__)


class MissionSession:
    """
    Session controller owning one engine.

    Attributes:
        mission_id: Mission this session belongs to
        engine: The owned significance engine
        context: Current areas of interest and critical assets
    """

    def __init__(
        self,
        mission_id: str,
        thresholds: Optional[SurfacingThresholds] = None,
        context: ContextLike = None,
        decision_log_size: int = 1000,
    ) -> None:
        """
        Initialize a mission session.

        Args:
            mission_id: Mission identifier
            thresholds: Policy thresholds (defaults if None)
            context: Initial context (empty if None)
            decision_log_size: Maximum decisions kept for the timeline. Must be >= 1.
        """
        if decision_log_size < 1:
            raise ValueError("decision_log_size must be >= 1")

        self.mission_id = mission_id
        self.engine = SignificanceEngine(thresholds=thresholds)
        self.context: SurfacingContext = coerce_context(context)

        self._lock = threading.Lock()
        self._log: Deque[DecisionResult] = deque(maxlen=decision_log_size)
        self._counts: Counter = Counter()

        logger.info(f"Session opened: mission={mission_id}")

    def update_context(self, context: ContextLike) -> SurfacingContext:
        """Replace the context used for subsequent events."""
        new_context = coerce_context(context)
        with self._lock:
            self.context = new_context
        logger.info(
            f"Context updated: mission={self.mission_id}, "
            f"aois={len(new_context.areas_of_interest)}, "
            f"assets={len(new_context.critical_assets)}"
        )
        return new_context

    def submit(self, event: EventLike) -> DecisionResult:
        """
        Classify and record one event.

        Args:
            event: Detection event or raw payload

        Returns:
            DecisionResult for the event
        """
        with self._lock:
            result = self.engine.evaluate(event, self.context)
            self._log.append(result)
            self._counts[result.decision] += 1
        return result

    def peek(self, event: EventLike) -> DecisionResult:
        """Evaluate an event without committing it."""
        with self._lock:
            return self.engine.peek(event, self.context)

    def decisions(self, minimum: Decision = Decision.IGNORE) -> List[DecisionResult]:
        """Logged decisions at or above ``minimum`` urgency, oldest first."""
        with self._lock:
            return [r for r in self._log if r.decision >= minimum]

    def surfaced(self) -> List[DecisionResult]:
        """Decisions shown to the operator (surface and auto-dispatch)."""
        return self.decisions(minimum=Decision.SURFACE)

    def recorded(self) -> List[DecisionResult]:
        """Decisions kept silently for later review."""
        with self._lock:
            return [r for r in self._log if r.decision == Decision.RECORD]

    def reset(self) -> None:
        """Discard history, keep context."""
        with self._lock:
            self.engine.reset()
            self._log.clear()
            self._counts.clear()
        logger.info(f"Session reset: mission={self.mission_id}")

    def metrics(self) -> Dict[str, Any]:
        """Get session metrics for observability."""
        with self._lock:
            return {
                "mission_id": self.mission_id,
                "decisions": {d.value: self._counts[d] for d in Decision},
                "log_size": len(self._log),
                **self.engine.get_metrics(),
            }


class SessionRegistry:
    """
    Mission id → session lookup.

    Attributes:
        thresholds: Thresholds given to newly opened sessions
        decision_log_size: Log size given to newly opened sessions
    """

    def __init__(
        self,
        thresholds: Optional[SurfacingThresholds] = None,
        decision_log_size: int = 1000,
    ) -> None:
        self.thresholds = thresholds
        self.decision_log_size = decision_log_size
        self._sessions: Dict[str, MissionSession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, mission_id: str) -> bool:
        return mission_id in self._sessions

    def open(self, mission_id: str, context: ContextLike = None) -> MissionSession:
        """Return the mission's session, creating it on first use."""
        with self._lock:
            session = self._sessions.get(mission_id)
            if session is None:
                session = MissionSession(
                    mission_id,
                    thresholds=self.thresholds,
                    context=context,
                    decision_log_size=self.decision_log_size,
                )
                self._sessions[mission_id] = session
            elif context is not None:
                session.update_context(context)
            return session

    def get(self, mission_id: str) -> MissionSession:
        """
        Look up an existing session.

        Raises:
            SessionNotFound: If no session is open for the mission
        """
        session = self._sessions.get(mission_id)
        if session is None:
            raise SessionNotFound(mission_id)
        return session

    def close(self, mission_id: str) -> None:
        """
        Close a session and discard its state.

        Raises:
            SessionNotFound: If no session is open for the mission
        """
        with self._lock:
            if self._sessions.pop(mission_id, None) is None:
                raise SessionNotFound(mission_id)
        logger.info(f"Session closed: mission={mission_id}")

    def clear(self) -> None:
        """Close all sessions."""
        with self._lock:
            self._sessions.clear()

    def metrics(self) -> Dict[str, Any]:
        """Aggregate metrics across sessions."""
        with self._lock:
            sessions = list(self._sessions.values())
        return {
            "sessions": len(sessions),
            "missions": {s.mission_id: s.metrics() for s in sessions},
        }
