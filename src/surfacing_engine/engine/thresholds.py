"""
Surfacing Thresholds
====================

Every constant the significance engine reasons with, in one place.

Defaults:
    Grid:         0.00035° cells (~35 m at mid-latitudes)
    Window:       60 s trailing event window
    Persistence:  12 s maximum gap between same-cell detections
    Asset radius: 60 m
    Cluster:      3 same-label detections within 100 m over 30 s

    fire:         0.88 to consider, 0.95 to auto-dispatch, 2 ticks to persist
    person/people 0.90 to consider inside an AOI, 3 ticks to persist
    chemical:     0.85 to consider
    near asset:   fire 0.85, person/people 0.92
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, FrozenSet

if TYPE_CHECKING:
    from surfacing_engine.config import Settings


@dataclass
class SurfacingThresholds:
    """
    Thresholds for the surfacing policy.

    Loaded from configuration file. Timestamps are epoch milliseconds,
    distances are meters.
    """

    # Spatial discretization (degrees)
    cell_deg: float = 0.00035

    # Timing (milliseconds)
    window_ms: int = 60_000
    persistence_gap_ms: int = 12_000

    # Proximity (meters)
    asset_radius_m: float = 60.0

    # Clustering (person/people only)
    cluster_count: int = 3
    cluster_radius_m: float = 100.0
    cluster_window_ms: int = 30_000

    # Fire
    fire_conf: float = 0.88
    fire_auto_conf: float = 0.95
    fire_persist_ticks: int = 2

    # Person / people
    person_conf: float = 0.90
    person_persist_ticks_aoi: int = 3

    # Chemical
    chemical_conf: float = 0.85

    # Asset proximity escalation
    asset_fire_conf: float = 0.85
    asset_person_conf: float = 0.92

    # Labels decided as ignore (still recorded into history)
    ignored_labels: FrozenSet[str] = field(default_factory=frozenset)

    # Stale cell eviction
    eviction_gap_multiple: int = 10
    eviction_interval_events: int = 500

    @property
    def eviction_age_ms(self) -> int:
        """Age after which an untouched cell is evicted."""
        return self.eviction_gap_multiple * self.persistence_gap_ms

    @classmethod
    def from_settings(cls, settings: "Settings") -> "SurfacingThresholds":
        """Build thresholds from loaded settings."""
        engine = settings.engine
        th = settings.thresholds
        return cls(
            cell_deg=engine.cell_deg,
            window_ms=engine.window_ms,
            persistence_gap_ms=engine.persistence_gap_ms,
            asset_radius_m=th.asset.radius_m,
            cluster_count=th.cluster.count,
            cluster_radius_m=th.cluster.radius_m,
            cluster_window_ms=th.cluster.window_ms,
            fire_conf=th.fire.conf,
            fire_auto_conf=th.fire.auto_conf,
            fire_persist_ticks=th.fire.persist_ticks,
            person_conf=th.person.conf,
            person_persist_ticks_aoi=th.person.persist_ticks_aoi,
            chemical_conf=th.chemical.conf,
            asset_fire_conf=th.asset.fire_conf,
            asset_person_conf=th.asset.person_conf,
            ignored_labels=frozenset(label.lower() for label in engine.ignored_labels),
            eviction_gap_multiple=engine.eviction_gap_multiple,
            eviction_interval_events=engine.eviction_interval_events,
        )
