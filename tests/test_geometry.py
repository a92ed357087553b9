"""
Geometry Tests
==============

Distances, grid cells, and region membership.
"""

import pytest

from surfacing_engine.geometry import AreaIndex, cell_key, distances_m, haversine_m, is_near_any
from surfacing_engine.models.geometry import AreaOfInterest, CriticalAsset


class TestDistance:
    """Tests for haversine distances."""

    def test_one_degree_latitude(self):
        assert haversine_m((0.0, 0.0), (0.0, 1.0)) == pytest.approx(111_195.08, abs=0.5)

    def test_zero_distance(self):
        assert haversine_m((11.5, 48.71), (11.5, 48.71)) == 0.0

    def test_vectorized_matches_scalar(self):
        origin = (11.5, 48.71)
        points = [(11.5005, 48.71), (11.5, 48.7108), (12.0, 49.0)]

        distances = distances_m(origin, points)

        assert distances.shape == (3,)
        for d, p in zip(distances, points):
            assert d == pytest.approx(haversine_m(origin, p), rel=1e-9)

    def test_vectorized_empty(self):
        assert distances_m((0.0, 0.0), []).size == 0


class TestCellKey:
    """Tests for grid discretization."""

    def test_includes_label(self):
        assert cell_key("fire", (11.50, 48.71), 0.00035) != cell_key("person", (11.50, 48.71), 0.00035)

    def test_rounds_half_up(self):
        assert cell_key("fire", (1.25, -0.25), 0.5) == "fire:3:0"

    def test_nearby_points_share_cell(self):
        assert cell_key("fire", (11.50, 48.71), 0.00035) == cell_key("fire", (11.50010, 48.71002), 0.00035)


class TestAreaIndex:
    """Tests for point-in-polygon membership."""

    @pytest.fixture
    def unit_square(self):
        return AreaOfInterest(id="sq", ring=[(0, 0), (1, 0), (1, 1), (0, 1)])

    def test_inside(self, unit_square):
        assert AreaIndex([unit_square]).contains((0.5, 0.5))

    def test_outside(self, unit_square):
        assert not AreaIndex([unit_square]).contains((1.0001, 0.5))

    def test_boundary_is_inside(self, unit_square):
        index = AreaIndex([unit_square])
        assert index.contains((0.5, 0.0))
        assert index.contains((1.0, 1.0))

    def test_any_of_several(self, unit_square):
        other = AreaOfInterest(id="far", ring=[(10, 10), (11, 10), (11, 11)])
        index = AreaIndex([other, unit_square])
        assert len(index) == 2
        assert index.contains((0.2, 0.2))

    def test_empty_index(self):
        assert not AreaIndex([]).contains((0.0, 0.0))

    def test_self_intersecting_ring_is_repaired(self):
        bowtie = AreaOfInterest(id="bowtie", ring=[(0, 0), (1, 1), (1, 0), (0, 1)])
        index = AreaIndex([bowtie])

        assert len(index) == 1
        assert index.contains((0.9, 0.5))
        assert not index.contains((0.5, 0.1))


class TestAssetProximity:
    """Tests for critical asset proximity."""

    def test_within_radius(self):
        asset = CriticalAsset(coord=(11.5, 48.71))
        # ~55 m north
        assert is_near_any((11.5, 48.7105), [asset], 60.0)

    def test_outside_radius(self):
        asset = CriticalAsset(coord=(11.5, 48.71))
        # ~67 m north
        assert not is_near_any((11.5, 48.7106), [asset], 60.0)

    def test_no_assets(self):
        assert not is_near_any((11.5, 48.71), [], 60.0)

    def test_radius_is_inclusive(self):
        asset = CriticalAsset(coord=(11.5, 48.71))
        point = (11.5003, 48.7102)
        radius = haversine_m(point, asset.coord.as_tuple())
        assert is_near_any(point, [asset], radius)

    def test_any_of_several_assets(self):
        far = CriticalAsset(id="far", coord=(12.0, 49.0))
        near = CriticalAsset(id="near", coord=(11.5, 48.71))
        assert is_near_any((11.5, 48.7105), [far, near], 60.0)
