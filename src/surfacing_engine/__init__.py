"""
Drone Event Surfacing
=====================

Event significance engine for drone mission detections.

Given a noisy stream of per-frame object detections (label, score,
coordinate, timestamp), the engine decides whether each event is ignored,
silently recorded, surfaced to the operator, or would trigger an automatic
response. Re-detections of the same incident are collapsed through
per-cell persistence, dispersed groups are caught through spatial
clustering, and geofenced areas of interest and critical assets escalate
priority.

Components:
    - engine: Significance engine, policy, thresholds
    - geometry: Grid cells, point-in-polygon, distances
    - models: Events, context, decisions, engine state
    - session: Per-mission ownership and serialization
    - scenario: Scenario loading and replay
    - main: FastAPI surface for the operator console

Example:
    from surfacing_engine.engine import SignificanceEngine

    engine = SignificanceEngine()
    decision = engine.decide(event, context)
"""

__version__ = "0.1.0"
__author__ = "Drone Ops Project"

__all__ = [
    "__version__",
]
