"""
Decision Models
===============

Output contract of the significance engine.

Output Contract:
    {
        "decision": "auto-dispatch",
        "reason_code": "FIRE_PERSISTENT_HIGH_CONFIDENCE",
        "timestamp": 5000,
        "signals": {
            "label": "fire",
            "cell_key": "fire:32857:139171",
            "persistence_count": 2,
            "inside_aoi": false,
            "near_asset": false,
            "cluster_hit": false
        }
    }

Consumers:
    - surface: rendered as an operator-visible alert/marker
    - record: logged silently for the review timeline
    - ignore: dropped
    - auto-dispatch: would trigger a response workflow (not executed here)
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from surfacing_engine.models.reason_codes import ReasonCode


class Decision(str, Enum):
    """
    Classification of one detection event, ordered by urgency.

    ``auto-dispatch`` > ``surface`` > ``record`` > ``ignore``.
    """

    IGNORE = "ignore"
    RECORD = "record"
    SURFACE = "surface"
    AUTO_DISPATCH = "auto-dispatch"

    @property
    def urgency(self) -> int:
        """Rank of this decision, 0 for ignore up to 3 for auto-dispatch."""
        return _URGENCY[self]

    @property
    def is_alert(self) -> bool:
        """Whether the presentation layer shows this to the operator."""
        return self in (Decision.SURFACE, Decision.AUTO_DISPATCH)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Decision):
            return NotImplemented
        return self.urgency < other.urgency

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Decision):
            return NotImplemented
        return self.urgency <= other.urgency

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Decision):
            return NotImplemented
        return self.urgency > other.urgency

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Decision):
            return NotImplemented
        return self.urgency >= other.urgency


_URGENCY = {
    Decision.IGNORE: 0,
    Decision.RECORD: 1,
    Decision.SURFACE: 2,
    Decision.AUTO_DISPATCH: 3,
}


@dataclass(frozen=True, slots=True)
class DecisionSignals:
    """
    Derived signals the policy reasons over.

    Attributes:
        label: Normalized label
        cell_key: Discretized spatial+label bucket
        persistence_count: Same-cell detections within the persistence gap
        inside_aoi: Event lies inside (or on) an area of interest
        near_asset: Event lies within the asset radius of a critical asset
        cluster_hit: Enough nearby same-label detections in the cluster window
    """

    label: str
    cell_key: str
    persistence_count: int
    inside_aoi: bool
    near_asset: bool
    cluster_hit: bool


@dataclass(frozen=True, slots=True)
class DecisionResult:
    """
    Decision with its explanation.

    ``signals`` is None only for rejected (invalid) events.
    """

    decision: Decision
    reason_code: ReasonCode
    timestamp: Optional[int] = None
    signals: Optional[DecisionSignals] = None
    event_id: Optional[str] = None

    def __repr__(self) -> str:
        return f"DecisionResult({self.decision.value}, {self.reason_code.value})"

    def to_dict(self) -> Dict[str, Any]:
        """Export as dictionary for logging/serialization."""
        return {
            "decision": self.decision.value,
            "reason_code": self.reason_code.value,
            "timestamp": self.timestamp,
            "event_id": self.event_id,
            "signals": asdict(self.signals) if self.signals else None,
        }
