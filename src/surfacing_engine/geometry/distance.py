"""
Great-Circle Distance
=====================

Haversine distance in meters between WGS84 coordinates.

The earth radius matches the one used by the console's map stack so that
"within 60 m" means the same thing on the map and in the engine.
"""

import math
from typing import Sequence, Tuple

import numpy as np


# Mean earth radius in meters
EARTH_RADIUS_M = 6_371_008.8


def haversine_m(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """
    Distance in meters between two (lng, lat) points.

    Args:
        a: First point (lng, lat) in degrees
        b: Second point (lng, lat) in degrees

    Returns:
        Great-circle distance in meters
    """
    lng1, lat1 = a
    lng2, lat2 = b
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distances_m(
    origin: Tuple[float, float],
    coords: Sequence[Tuple[float, float]],
) -> np.ndarray:
    """
    Vectorized haversine from one origin to many points.

    Args:
        origin: Reference point (lng, lat)
        coords: Points to measure (lng, lat)

    Returns:
        Array of distances in meters, same order as ``coords``
    """
    if len(coords) == 0:
        return np.empty(0, dtype=np.float64)

    points = np.radians(np.asarray(coords, dtype=np.float64))
    lng0, lat0 = np.radians(origin)
    lng, lat = points[:, 0], points[:, 1]

    h = (
        np.sin((lat - lat0) / 2) ** 2
        + np.cos(lat0) * np.cos(lat) * np.sin((lng - lng0) / 2) ** 2
    )
    # Rounding can push h a hair outside [0, 1]
    h = np.clip(h, 0.0, 1.0)
    return 2 * EARTH_RADIUS_M * np.arctan2(np.sqrt(h), np.sqrt(1 - h))
