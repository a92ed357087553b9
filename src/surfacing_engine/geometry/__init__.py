"""
Geometry Module
===============

Spatial predicates for the significance engine.

This module provides utilities for working with the explicitly declared
context (areas of interest, critical assets) supplied with every call.
"""

from surfacing_engine.geometry.distance import distances_m, haversine_m
from surfacing_engine.geometry.regions import AreaIndex, cell_key, is_near_any

__all__ = [
    "AreaIndex",
    "cell_key",
    "distances_m",
    "haversine_m",
    "is_near_any",
]
