"""
Event Significance Engine
=========================

Decides, per detection event, whether it is ignored, recorded, surfaced
to the operator, or would trigger an automatic response.

Per event, in order:
    1. Lower-case the label
    2. Append to the trailing window, prune entries older than window_ms
    3. Update the persistence counter of the (label, grid cell) bucket:
       reset to 1 after a gap longer than persistence_gap_ms, else +1
    4. Derive signals: inside_aoi, near_asset, cluster_hit (person/people)
    5. Apply the label policy

Key Features:
    - Every valid event mutates state, whatever the decision
    - Invalid events are ignored and leave state untouched
    - Missing context degrades AOI/asset checks to False, never raises
    - Read-only peek() for replay and inspection
    - Lazy eviction of stale cells bounds memory over long sessions

Concurrency:
    Calls must be serialized by the owner (see session.MissionSession).
    There is no internal locking and no suspension point.

Example:
    from surfacing_engine.engine import SignificanceEngine

    engine = SignificanceEngine()
    decision = engine.decide(
        {"label": "fire", "score": 0.96, "coord": [11.50, 48.71], "ts": 1000},
        context,
    )
"""

import logging
from collections import deque
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from surfacing_engine.engine.policy import PERSON_LABELS, SurfacingPolicy
from surfacing_engine.engine.thresholds import SurfacingThresholds
from surfacing_engine.errors import InvalidInput
from surfacing_engine.geometry import AreaIndex, cell_key, distances_m, is_near_any
from surfacing_engine.models.decision import Decision, DecisionResult, DecisionSignals
from surfacing_engine.models.event import DetectionEvent
from surfacing_engine.models.geometry import SurfacingContext
from surfacing_engine.models.reason_codes import ReasonCode
from surfacing_engine.models.state import CellRecord, EngineState, RecentEntry


logger = logging.getLogger(__name__)


EventLike = Union[DetectionEvent, Mapping[str, Any]]
ContextLike = Union[SurfacingContext, Mapping[str, Any], None]


# =============================================================================
# Input Coercion
# =============================================================================

def coerce_event(event: EventLike) -> DetectionEvent:
    """
    Validate an incoming event.

    Args:
        event: DetectionEvent or raw mapping from the perception feed

    Returns:
        Validated DetectionEvent

    Raises:
        InvalidInput: If the payload does not conform
    """
    if isinstance(event, DetectionEvent):
        return event
    if not isinstance(event, Mapping):
        raise InvalidInput(f"Unsupported event type: {type(event).__name__}", value=event)

    try:
        return DetectionEvent.model_validate(event)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        loc = first.get("loc") or ("event",)
        raise InvalidInput(
            f"Invalid detection event: {first.get('msg', str(e))}",
            field=str(loc[0]),
            value=first.get("input"),
        ) from e


def coerce_context(context: ContextLike) -> SurfacingContext:
    """
    Normalize the per-call context.

    Accepts a SurfacingContext, a mapping with ``areas_of_interest`` /
    ``critical_assets``, or the console's ``aois`` (GeoJSON) / ``assets``
    shape. Areas and assets are validated one at a time; a malformed entry
    is skipped with a warning and the rest of the context is kept.
    """
    if context is None:
        return SurfacingContext()
    if isinstance(context, SurfacingContext):
        return context

    try:
        if "aois" in context or "assets" in context:
            return SurfacingContext.from_geojson(context.get("aois"), context.get("assets"))
        return SurfacingContext.from_mapping(context)
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Unusable context, treating as empty: {e}")
        return SurfacingContext()


# =============================================================================
# Functional API
# =============================================================================

def init_engine() -> EngineState:
    """Create an empty engine state for a new session."""
    return EngineState()


def decide(
    state: EngineState,
    event: EventLike,
    context: ContextLike = None,
    thresholds: Optional[SurfacingThresholds] = None,
) -> Decision:
    """
    Classify one event and record it into ``state``.

    Args:
        state: Engine state owned by the caller's session
        event: Detection event
        context: Areas of interest and critical assets
        thresholds: Policy thresholds (defaults if None)

    Returns:
        One of ignore, record, surface, auto-dispatch
    """
    return evaluate(state, event, context, thresholds).decision


def evaluate(
    state: EngineState,
    event: EventLike,
    context: ContextLike = None,
    thresholds: Optional[SurfacingThresholds] = None,
    commit: bool = True,
) -> DecisionResult:
    """
    Classify one event and explain the decision.

    Args:
        state: Engine state owned by the caller's session
        event: Detection event
        context: Areas of interest and critical assets
        thresholds: Policy thresholds (defaults if None)
        commit: When False, compute as if the event were processed but
            leave ``state`` untouched

    Returns:
        DecisionResult with decision, reason code, and signals
    """
    th = thresholds or SurfacingThresholds()

    try:
        ev = coerce_event(event)
    except InvalidInput as e:
        if commit:
            state.events_rejected += 1
        logger.warning(f"Rejected event ({e.field}): {e}")
        return DecisionResult(decision=Decision.IGNORE, reason_code=ReasonCode.INVALID_INPUT)

    ctx = coerce_context(context)
    label = ev.normalized_label
    coord = ev.coord.as_tuple()
    t = ev.timestamp

    window = _updated_window(state, label, coord, t, th, commit)
    key, persistence = _updated_cell(state, label, coord, t, th, commit)

    signals = DecisionSignals(
        label=label,
        cell_key=key,
        persistence_count=persistence,
        inside_aoi=AreaIndex(ctx.areas_of_interest).contains(coord),
        near_asset=is_near_any(coord, ctx.critical_assets, th.asset_radius_m),
        cluster_hit=_cluster_hit(window, label, coord, t, th),
    )

    decision, reason = SurfacingPolicy(th).evaluate(signals, ev.score)
    result = DecisionResult(
        decision=decision,
        reason_code=reason,
        timestamp=t,
        signals=signals,
        event_id=ev.event_id,
    )

    if commit:
        state.events_processed += 1
        interval = th.eviction_interval_events
        if interval and state.events_processed % interval == 0:
            evict_stale(state, t, th)

        if decision.is_alert:
            logger.warning(
                f"{decision.value.upper()}: {label} score={ev.score:.2f} "
                f"at ({coord[0]:.5f}, {coord[1]:.5f}) | reason={reason.value}, "
                f"persistence={persistence}"
            )
        else:
            logger.debug(f"{decision.value}: {label} score={ev.score:.2f} reason={reason.value}")

    return result


def evict_stale(
    state: EngineState,
    now_ms: int,
    thresholds: Optional[SurfacingThresholds] = None,
) -> int:
    """
    Remove cells untouched for longer than the eviction age.

    The eviction age is a multiple of the persistence gap, so an evicted
    cell would have been reset to 1 on its next in-order detection anyway.
    An out-of-order event older than the evicted cell's last detection is
    the exception: with the cell kept its negative gap would increment the
    count, after eviction it restarts at 1.

    Args:
        state: Engine state to sweep
        now_ms: Reference time (epoch ms)
        thresholds: Policy thresholds (defaults if None)

    Returns:
        Number of cells removed
    """
    th = thresholds or SurfacingThresholds()
    max_age = th.eviction_age_ms

    stale = [
        key for key, record in state.cell_history.items()
        if now_ms - record.last_timestamp > max_age
    ]
    for key in stale:
        del state.cell_history[key]

    if stale:
        state.cells_evicted += len(stale)
        logger.info(f"Evicted {len(stale)} stale cells, {len(state.cell_history)} remain")
    return len(stale)


# =============================================================================
# Internals
# =============================================================================

def _updated_window(
    state: EngineState,
    label: str,
    coord: Tuple[float, float],
    t: int,
    th: SurfacingThresholds,
    commit: bool,
) -> List[RecentEntry]:
    """Append the event to the trailing window and prune old entries."""
    cutoff = t - th.window_ms
    kept = [entry for entry in state.recent_window if entry.timestamp >= cutoff]
    kept.append(RecentEntry(label=label, coord=coord, timestamp=t))

    if commit:
        state.recent_window = deque(kept)
    return kept


def _updated_cell(
    state: EngineState,
    label: str,
    coord: Tuple[float, float],
    t: int,
    th: SurfacingThresholds,
    commit: bool,
) -> Tuple[str, int]:
    """Update the persistence counter of the event's cell."""
    key = cell_key(label, coord, th.cell_deg)
    prev = state.cell_history.get(key)

    if prev is None or t - prev.last_timestamp > th.persistence_gap_ms:
        count = 1
    else:
        count = prev.count + 1

    if prev is not None and t < prev.last_timestamp:
        logger.debug(f"Out-of-order event in {key}: {t} < {prev.last_timestamp}")
        if commit:
            state.out_of_order_events += 1

    if commit:
        state.cell_history[key] = CellRecord(count=count, last_timestamp=t)
    return key, count


def _cluster_hit(
    window: List[RecentEntry],
    label: str,
    coord: Tuple[float, float],
    t: int,
    th: SurfacingThresholds,
) -> bool:
    """Count nearby same-label detections in the cluster window."""
    if label not in PERSON_LABELS:
        return False

    since = t - th.cluster_window_ms
    candidates = [
        entry.coord for entry in window
        if entry.label == label and entry.timestamp >= since
    ]
    if len(candidates) < th.cluster_count:
        return False

    nearby = int((distances_m(coord, candidates) <= th.cluster_radius_m).sum())
    return nearby >= th.cluster_count


# =============================================================================
# Engine
# =============================================================================

class SignificanceEngine:
    """
    Significance engine bound to one session's state.

    This is a stateless-per-call classifier layered over accumulating
    history. The instance owns its EngineState; callers hold the engine
    by reference for the whole session and never reconstruct it.

    Attributes:
        thresholds: Policy thresholds
        state: Owned engine state
    """

    def __init__(
        self,
        thresholds: Optional[SurfacingThresholds] = None,
        state: Optional[EngineState] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            thresholds: Policy thresholds (uses defaults if None)
            state: Existing state to adopt (fresh if None)
        """
        self.thresholds = thresholds or SurfacingThresholds()
        self.state = state if state is not None else init_engine()
        self._last_result: Optional[DecisionResult] = None

        logger.info(
            f"SignificanceEngine initialized: "
            f"window={self.thresholds.window_ms}ms, "
            f"gap={self.thresholds.persistence_gap_ms}ms, "
            f"cell={self.thresholds.cell_deg}°"
        )

    def decide(self, event: EventLike, context: ContextLike = None) -> Decision:
        """Classify and record one event. See ``decide``."""
        return self.evaluate(event, context).decision

    def evaluate(self, event: EventLike, context: ContextLike = None) -> DecisionResult:
        """Classify and record one event, returning the explanation."""
        result = evaluate(self.state, event, context, self.thresholds, commit=True)
        self._last_result = result
        return result

    def peek(self, event: EventLike, context: ContextLike = None) -> DecisionResult:
        """
        Evaluate an event without committing it.

        Returns what ``evaluate`` would return right now, leaving cell
        history and the trailing window unchanged.
        """
        return evaluate(self.state, event, context, self.thresholds, commit=False)

    def evict_stale(self, now_ms: int) -> int:
        """Remove stale cells. See ``evict_stale``."""
        return evict_stale(self.state, now_ms, self.thresholds)

    @property
    def last_result(self) -> Optional[DecisionResult]:
        """Get last committed result."""
        return self._last_result

    def reset(self) -> None:
        """Discard all history."""
        self.state = init_engine()
        self._last_result = None
        logger.info("SignificanceEngine reset")

    def get_metrics(self) -> Dict[str, Any]:
        """Get engine metrics for observability."""
        metrics = self.state.to_dict()
        if self._last_result is not None:
            metrics["last_decision"] = self._last_result.decision.value
            metrics["last_reason_code"] = self._last_result.reason_code.value
        return metrics
