"""
Engine Module
=============

Deterministic event significance engine.

This module implements the core decision logic:
    - significance.py: State handling (window, persistence cells, eviction)
    - policy.py: Label-specific rules over derived signals
    - thresholds.py: Every tunable constant

Key Design Decisions:
    - Pure in-memory computation, no I/O, no suspension points
    - Every valid event mutates state, independent of the decision
    - Decisions carry machine-readable reason codes
    - Persistence (repeated detection) substitutes for one very confident frame
"""

from surfacing_engine.engine.policy import SurfacingPolicy
from surfacing_engine.engine.significance import (
    SignificanceEngine,
    decide,
    evaluate,
    evict_stale,
    init_engine,
)
from surfacing_engine.engine.thresholds import SurfacingThresholds

__all__ = [
    "SignificanceEngine",
    "SurfacingPolicy",
    "SurfacingThresholds",
    "decide",
    "evaluate",
    "evict_stale",
    "init_engine",
]
