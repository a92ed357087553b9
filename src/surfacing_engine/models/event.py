"""
Detection Event Schema
======================

This module defines the Pydantic model for detection events received from
the perception/video pipeline.

Input Contract (from the perception feed):
    {
        "id": "evt-0042",
        "label": "fire",
        "score": 0.93,
        "coord": [11.50, 48.71],
        "ts": 1707321234567,
        "bbox": [120, 80, 64, 48]
    }

Guarantees (from the feed):
    - ts is epoch milliseconds, non-decreasing per stream (not enforced)
    - coord is (lng, lat) WGS84

Example:
    from surfacing_engine.models.event import DetectionEvent

    event = DetectionEvent.model_validate(payload)
    print(event.normalized_label, event.coord.as_tuple())
"""

import math
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from surfacing_engine.models.geometry import Coordinate


class DetectionEvent(BaseModel):
    """
    One perception-pipeline output: a labeled, scored, geolocated,
    timestamped observation.

    Any payload that does not conform is rejected with a ValidationError,
    which the engine turns into an ``ignore`` decision.

    Attributes:
        label: Category tag (free-form; fire, person, people, chemical are recognized)
        score: Detector confidence in [0, 1]
        coord: Where the detection occurred
        timestamp: Epoch milliseconds
        event_id: Upstream identifier, if any
        bbox: Bounding box in frame pixels, passed through untouched
        thumbnail: Snapshot reference, passed through untouched
        video_time: Offset into the mission video in seconds
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str = Field(..., min_length=1, description="Detection category")

    score: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Detector confidence in [0, 1]",
    )

    coord: Coordinate = Field(..., description="Detection position (lng, lat)")

    timestamp: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("timestamp", "ts"),
        description="Epoch milliseconds",
    )

    event_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("event_id", "id"),
    )
    bbox: Optional[List[float]] = Field(default=None)
    thumbnail: Optional[str] = Field(default=None)
    video_time: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("video_time", "videoTime"),
    )

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("label must not be blank")
        return v

    @field_validator("score")
    @classmethod
    def validate_score(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("score must be finite")
        return v

    @property
    def normalized_label(self) -> str:
        """Label lower-cased for case-insensitive matching."""
        return self.label.strip().lower()
