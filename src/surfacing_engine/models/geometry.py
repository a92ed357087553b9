"""
Geometry Models
===============

This module defines the geographic context the engine reasons over.

Design Philosophy:
    Areas of interest and critical assets are EXPLICITLY DECLARED by the
    mission configuration, NOT discovered at runtime. They are supplied
    with every call as a SurfacingContext snapshot and may change between
    calls without the engine caching anything.

Supported Geometries:
    - Coordinate: (longitude, latitude) in WGS84 degrees, no altitude
    - AreaOfInterest: Geofenced polygon with elevated priority
    - CriticalAsset: Protected point location (e.g. a drone port)
    - SurfacingContext: The per-call snapshot of both

Example Context (GeoJSON, as drawn in the operator console):
    {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"id": "aoi-1", "name": "School"},
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[[11.49, 48.70], [11.51, 48.70],
                                     [11.51, 48.72], [11.49, 48.72],
                                     [11.49, 48.70]]]
                }
            }
        ]
    }

Note:
    Coordinates are ordered (lng, lat) everywhere, matching GeoJSON.
"""

import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


logger = logging.getLogger(__name__)


class Coordinate(BaseModel):
    """
    WGS84 position as (longitude, latitude) in degrees.

    Accepts either a mapping ``{"lng": .., "lat": ..}`` or a 2-sequence
    ``[lng, lat]`` as produced by the perception feed.

    Attributes:
        lng: Longitude in degrees
        lat: Latitude in degrees
    """

    model_config = ConfigDict(frozen=True)

    lng: float = Field(..., description="Longitude in degrees")
    lat: float = Field(..., description="Latitude in degrees")

    @model_validator(mode="before")
    @classmethod
    def coerce_pair(cls, value: Any) -> Any:
        """Accept [lng, lat] pairs in addition to mappings."""
        if isinstance(value, (list, tuple)):
            if len(value) != 2:
                raise ValueError(f"Coordinate must have exactly 2 values, got {len(value)}")
            return {"lng": value[0], "lat": value[1]}
        return value

    @field_validator("lng", "lat")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        """Reject NaN and infinities."""
        if not math.isfinite(v):
            raise ValueError("Coordinate values must be finite")
        return v

    def as_tuple(self) -> Tuple[float, float]:
        """Return the coordinate as a (lng, lat) tuple."""
        return (self.lng, self.lat)


class AreaOfInterest(BaseModel):
    """
    Geofenced polygon marking a region of elevated operational priority.

    The ring may be given open or explicitly closed (last vertex equal to
    the first); it is stored open. Membership is boundary-inclusive.

    Attributes:
        id: Unique identifier of the area
        name: Human-readable name for logging/display
        ring: Ordered vertices of the outer boundary (minimum 3)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default="aoi", description="Unique identifier")
    name: Optional[str] = Field(default=None, description="Display name")
    ring: List[Coordinate] = Field(
        ...,
        description="Ordered outer ring vertices (lng, lat)",
    )

    @field_validator("ring")
    @classmethod
    def validate_ring(cls, v: List[Coordinate]) -> List[Coordinate]:
        """Drop an explicit closing vertex and require 3 distinct vertices."""
        if len(v) > 1 and v[0] == v[-1]:
            v = v[:-1]
        if len(set(v)) < 3:
            raise ValueError("Area of interest must have at least 3 distinct vertices")
        return v

    @classmethod
    def from_geojson_feature(cls, feature: Dict[str, Any]) -> "AreaOfInterest":
        """
        Build an area from a GeoJSON Polygon feature.

        Only the outer ring is used; holes are ignored.

        Raises:
            ValueError: If the feature is not a Polygon
        """
        geometry = feature.get("geometry") or {}
        if geometry.get("type") != "Polygon":
            raise ValueError(f"Unsupported geometry type: {geometry.get('type')}")

        properties = feature.get("properties") or {}
        rings = geometry.get("coordinates") or []
        if not rings:
            raise ValueError("Polygon feature has no coordinates")

        return cls(
            id=str(feature.get("id") or properties.get("id") or "aoi"),
            name=properties.get("name"),
            ring=rings[0],
        )


class CriticalAsset(BaseModel):
    """
    Protected point location whose proximity elevates event priority.

    Attributes:
        id: Unique identifier of the asset
        name: Human-readable name (e.g. "Drone port North")
        coord: Asset position
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default="asset", description="Unique identifier")
    name: Optional[str] = Field(default=None, description="Display name")
    coord: Coordinate = Field(..., description="Asset position (lng, lat)")

    @model_validator(mode="before")
    @classmethod
    def coerce_bare_coordinate(cls, value: Any) -> Any:
        """Accept a bare [lng, lat] pair as an anonymous asset."""
        if isinstance(value, (list, tuple)):
            return {"coord": value}
        return value


ModelT = TypeVar("ModelT", bound=BaseModel)


def _valid_items(model: Type[ModelT], items: Any, kind: str) -> List[ModelT]:
    """Validate items one at a time, skipping those that fail with a warning."""
    if items is None:
        return []
    if not isinstance(items, (list, tuple)):
        logger.warning(f"Ignoring {kind} list of type {type(items).__name__}")
        return []

    valid: List[ModelT] = []
    for item in items:
        try:
            valid.append(model.model_validate(item))
        except ValueError as e:
            logger.warning(f"Skipping {kind}: {e}")
    return valid


class SurfacingContext(BaseModel):
    """
    Snapshot of the geographic context for one decision.

    Both lists may be empty; the corresponding checks then evaluate
    to False rather than erroring.

    Attributes:
        areas_of_interest: Active geofenced polygons
        critical_assets: Protected point locations
    """

    model_config = ConfigDict(frozen=True)

    areas_of_interest: List[AreaOfInterest] = Field(default_factory=list)
    critical_assets: List[CriticalAsset] = Field(default_factory=list)

    @classmethod
    def from_geojson(
        cls,
        feature_collection: Optional[Dict[str, Any]] = None,
        assets: Optional[Sequence[Any]] = None,
    ) -> "SurfacingContext":
        """
        Build a context from a GeoJSON FeatureCollection and asset list.

        Features that are not Polygons, and assets that fail validation,
        are skipped with a warning.

        Args:
            feature_collection: GeoJSON FeatureCollection of AOI polygons
            assets: Asset coordinates or asset mappings
        """
        areas: List[AreaOfInterest] = []
        for feature in (feature_collection or {}).get("features") or []:
            try:
                areas.append(AreaOfInterest.from_geojson_feature(feature))
            except ValueError as e:
                logger.warning(f"Skipping area of interest feature: {e}")

        return cls(
            areas_of_interest=areas,
            critical_assets=_valid_items(CriticalAsset, assets, "critical asset"),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SurfacingContext":
        """
        Build a context leniently from ``areas_of_interest`` / ``critical_assets``.

        Each area and asset is validated on its own, so one malformed entry
        drops only itself. ``areas_of_interest`` may also be a GeoJSON
        FeatureCollection.

        Args:
            data: Mapping in the canonical context shape
        """
        areas = data.get("areas_of_interest")
        if isinstance(areas, dict) and areas.get("type") == "FeatureCollection":
            areas_of_interest = cls.from_geojson(areas).areas_of_interest
        else:
            areas_of_interest = _valid_items(AreaOfInterest, areas, "area of interest")

        return cls(
            areas_of_interest=areas_of_interest,
            critical_assets=_valid_items(CriticalAsset, data.get("critical_assets"), "critical asset"),
        )
