"""
Test Configuration
==================

Pytest fixtures and test configuration for the surfacing engine.
"""

import pytest

from surfacing_engine.engine import SignificanceEngine, SurfacingThresholds
from surfacing_engine.models.geometry import AreaOfInterest, CriticalAsset, SurfacingContext


# Fire scenario position used throughout the tests
BASE_COORD = (11.50, 48.71)


@pytest.fixture
def thresholds():
    """Default thresholds with lazy eviction disabled."""
    return SurfacingThresholds(eviction_interval_events=0)


@pytest.fixture
def engine(thresholds):
    """Fresh engine for one test."""
    return SignificanceEngine(thresholds=thresholds)


@pytest.fixture
def aoi():
    """Square area of interest around BASE_COORD (~1.5 km x 2.2 km)."""
    return AreaOfInterest(
        id="aoi-1",
        name="Test area",
        ring=[(11.49, 48.70), (11.51, 48.70), (11.51, 48.72), (11.49, 48.72)],
    )


@pytest.fixture
def aoi_context(aoi):
    """Context with one AOI and no assets."""
    return SurfacingContext(areas_of_interest=[aoi])


@pytest.fixture
def asset_context():
    """Context with one critical asset at BASE_COORD and no AOIs."""
    return SurfacingContext(
        critical_assets=[CriticalAsset(id="port-1", name="Drone port", coord=BASE_COORD)],
    )


@pytest.fixture
def make_event():
    """Factory for raw detection event payloads."""
    def _make(label="fire", score=0.9, coord=BASE_COORD, ts=0, **extra):
        return {"label": label, "score": score, "coord": list(coord), "ts": ts, **extra}
    return _make


@pytest.fixture
def sample_geojson():
    """Console-style AOI FeatureCollection around BASE_COORD."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"id": "school", "name": "School"},
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[
                        [11.49, 48.70], [11.51, 48.70], [11.51, 48.72],
                        [11.49, 48.72], [11.49, 48.70],
                    ]],
                },
            },
            {
                "type": "Feature",
                "properties": {"id": "road"},
                "geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]},
            },
        ],
    }
