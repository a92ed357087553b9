"""
Data Models
===========

Models for the surfacing engine.

This module re-exports all data models for convenient access.

Models:
    Input:
        - DetectionEvent: Schema for events from the perception feed

    Geometry:
        - Coordinate, AreaOfInterest, CriticalAsset: Geographic primitives
        - SurfacingContext: Per-call snapshot of AOIs and assets

    State:
        - CellRecord, RecentEntry, EngineState: Engine-owned history

    Output:
        - Decision: ignore / record / surface / auto-dispatch
        - ReasonCode: Machine-readable explanation
        - DecisionSignals, DecisionResult: Decision with its derived signals
"""

from surfacing_engine.models.event import DetectionEvent
from surfacing_engine.models.geometry import (
    AreaOfInterest,
    Coordinate,
    CriticalAsset,
    SurfacingContext,
)
from surfacing_engine.models.state import CellRecord, EngineState, RecentEntry
from surfacing_engine.models.decision import Decision, DecisionResult, DecisionSignals
from surfacing_engine.models.reason_codes import ReasonCode

__all__ = [
    # Input
    "DetectionEvent",
    # Geometry
    "Coordinate",
    "AreaOfInterest",
    "CriticalAsset",
    "SurfacingContext",
    # State
    "CellRecord",
    "RecentEntry",
    "EngineState",
    # Output
    "Decision",
    "DecisionResult",
    "DecisionSignals",
    "ReasonCode",
]
