"""
Region Queries
==============

Spatial predicates used by the significance engine.

This module handles:
    - Discretizing a coordinate into a label-specific grid cell
    - Boundary-inclusive point-in-polygon queries against AOIs
    - Proximity checks against critical assets

Context is re-read on every call. Nothing here caches geometry between
calls, since AOIs and assets may change without the engine being told.

Example:
    from surfacing_engine.geometry import AreaIndex, cell_key

    index = AreaIndex(context.areas_of_interest)
    inside = index.contains((11.50, 48.71))

    key = cell_key("fire", (11.50, 48.71), cell_deg=0.00035)
"""

import logging
import math
from typing import List, Sequence, Tuple

from shapely.geometry import Point
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry.base import BaseGeometry
from shapely.validation import make_valid

from surfacing_engine.geometry.distance import haversine_m
from surfacing_engine.models.geometry import AreaOfInterest, CriticalAsset


logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    """Round to nearest integer, halves toward +infinity."""
    return int(math.floor(value + 0.5))


def cell_key(label: str, coord: Tuple[float, float], cell_deg: float) -> str:
    """
    Compute the grid bucket for a label at a coordinate.

    Jittering detections of the same incident land in the same bucket.
    The label is part of the key so that, for example, a fire and a
    person at the same spot accumulate persistence independently.

    Args:
        label: Normalized label
        coord: (lng, lat)
        cell_deg: Cell size in degrees (~35 m at mid-latitudes for 0.00035)

    Returns:
        Key of the form ``label:ix:iy``
    """
    lng, lat = coord
    return f"{label}:{_round_half_up(lng / cell_deg)}:{_round_half_up(lat / cell_deg)}"


class AreaIndex:
    """
    Point-in-polygon queries over a set of areas of interest.

    Membership is boundary-inclusive: a point exactly on an edge or vertex
    counts as inside. Self-intersecting rings are repaired; rings that
    cannot be repaired are skipped with a warning.

    Attributes:
        geometries: Shapely geometries, one per usable area
    """

    def __init__(self, areas: Sequence[AreaOfInterest] = ()) -> None:
        """
        Build the index.

        Args:
            areas: Areas of interest from the current context
        """
        self.geometries: List[BaseGeometry] = []
        for area in areas:
            geometry = self._build(area)
            if geometry is not None:
                self.geometries.append(geometry)

    @staticmethod
    def _build(area: AreaOfInterest):
        """Convert an area to a valid shapely geometry, or None."""
        polygon = ShapelyPolygon([c.as_tuple() for c in area.ring])
        if polygon.is_valid:
            return polygon

        repaired = make_valid(polygon)
        if repaired.is_empty:
            logger.warning(f"Skipping unusable area of interest: {area.id}")
            return None

        logger.debug(f"Repaired invalid area of interest: {area.id}")
        return repaired

    def __len__(self) -> int:
        return len(self.geometries)

    def contains(self, coord: Tuple[float, float]) -> bool:
        """
        Check whether a point lies inside or on any area.

        Args:
            coord: (lng, lat)

        Returns:
            True if any area covers the point
        """
        if not self.geometries:
            return False
        point = Point(coord)
        return any(geometry.covers(point) for geometry in self.geometries)


def is_near_any(
    coord: Tuple[float, float],
    assets: Sequence[CriticalAsset],
    radius_m: float,
) -> bool:
    """
    Check whether a point is within ``radius_m`` of any asset.

    Args:
        coord: (lng, lat)
        assets: Critical assets from the current context
        radius_m: Proximity radius in meters (inclusive)

    Returns:
        True if at least one asset is close enough
    """
    return any(haversine_m(coord, asset.coord.as_tuple()) <= radius_m for asset in assets)
