"""
Engine State Models
===================

This module defines the only persistent data of the significance engine.

Core Concepts:
    - CellRecord: Persistence counter for one label-specific grid cell
    - RecentEntry: One processed event kept for spatial clustering
    - EngineState: Cell history plus the trailing event window

Cell Lifecycle:
    absent → count=1 → count+1 per detection within the persistence gap
    → reset to 1 after a silence longer than the gap
    → evicted after a long silence (eviction multiple × gap)

Ownership:
    EngineState is created once per mission session, owned exclusively by
    one engine, mutated in place on every processed event, and discarded
    when the session ends. It is never shared or cloned mid-session.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Tuple


@dataclass(frozen=True, slots=True)
class CellRecord:
    """
    Persistence counter for one (label, cell) bucket.

    Attributes:
        count: Detections accumulated without a gap (>= 1)
        last_timestamp: Timestamp of the latest detection (epoch ms)
    """

    count: int
    last_timestamp: int

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.count < 1:
            raise ValueError("count must be >= 1")


@dataclass(frozen=True, slots=True)
class RecentEntry:
    """
    One processed event retained in the trailing window.

    Attributes:
        label: Normalized label
        coord: (lng, lat)
        timestamp: Epoch ms
    """

    label: str
    coord: Tuple[float, float]
    timestamp: int


@dataclass
class EngineState:
    """
    Mutable engine state for one mission session.

    Attributes:
        cell_history: Cell key → persistence record
        recent_window: Events of the trailing window, in arrival order
        events_processed: Events that passed validation and mutated state
        events_rejected: Events rejected as invalid input
        out_of_order_events: Events older than a previously seen event in their cell
        cells_evicted: Stale cells removed by eviction sweeps
    """

    cell_history: Dict[str, CellRecord] = field(default_factory=dict)
    recent_window: Deque[RecentEntry] = field(default_factory=deque)
    events_processed: int = 0
    events_rejected: int = 0
    out_of_order_events: int = 0
    cells_evicted: int = 0

    def to_dict(self) -> dict:
        """Export counters for logging/metrics."""
        return {
            "cells": len(self.cell_history),
            "window_size": len(self.recent_window),
            "events_processed": self.events_processed,
            "events_rejected": self.events_rejected,
            "out_of_order_events": self.out_of_order_events,
            "cells_evicted": self.cells_evicted,
        }
