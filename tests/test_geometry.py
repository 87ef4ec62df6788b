import math
import pytest
from hypothesis import given, strategies as st

from stproute.geometry import (
    Position,
    calculate_haversine_distance,
    coords_to_polyline,
    create_transverse_mercator_projection,
    is_valid_position,
)

# Strategy for valid GPS coordinates
valid_lat = st.floats(-85.0, 85.0)
valid_lon = st.floats(-180.0, 180.0)
valid_position = st.builds(Position, latitude=valid_lat, longitude=valid_lon)


class TestDistanceProperties:

    @given(valid_position, valid_position)
    def test_distance_is_non_negative(self, pos1, pos2):
        assert calculate_haversine_distance(pos1, pos2) >= 0

    @given(valid_position)
    def test_distance_to_self_is_zero(self, pos):
        assert calculate_haversine_distance(pos, pos) == 0

    @given(valid_position, valid_position)
    def test_distance_is_symmetric(self, pos1, pos2):
        dist_ab = calculate_haversine_distance(pos1, pos2)
        dist_ba = calculate_haversine_distance(pos2, pos1)
        assert abs(dist_ab - dist_ba) < 1e-6

    @given(valid_position, valid_position)
    def test_distance_bounded_by_half_circumference(self, pos1, pos2):
        assert calculate_haversine_distance(pos1, pos2) <= math.pi * 6371000.0 + 1e-6


def test_seattle_to_portland():
    seattle = Position(47.65592, -122.30085)
    portland = Position(45.53076, -122.65358)
    distance_km = calculate_haversine_distance(seattle, portland) / 1000
    assert 230 < distance_km < 245


def test_one_degree_of_latitude():
    distance = calculate_haversine_distance(Position(47.0, -122.0), Position(48.0, -122.0))
    assert distance == pytest.approx(111195, rel=1e-3)


@pytest.mark.parametrize(
    "position, expected",
    [
        (Position(47.1, -122.4), True),
        (Position(90.0, 180.0), True),
        (Position(-90.0, -180.0), True),
        (Position(90.1, 0.0), False),
        (Position(0.0, -180.5), False),
        (Position(float("nan"), 0.0), False),
        (Position(0.0, float("inf")), False),
        (Position(None, 0.0), False),
    ],
)
def test_is_valid_position(position, expected):
    assert is_valid_position(position) is expected


def test_projected_polyline_length_matches_haversine():
    a = Position(47.11504, -122.42719)
    b = Position(46.93872, -122.55434)
    projection = create_transverse_mercator_projection(
        (min(a.latitude, b.latitude), min(a.longitude, b.longitude),
         max(a.latitude, b.latitude), max(a.longitude, b.longitude))
    )
    line = coords_to_polyline([a, b], projection)
    assert line.length == pytest.approx(calculate_haversine_distance(a, b), rel=5e-3)


def test_unprojected_polyline_uses_lon_lat():
    line = coords_to_polyline([Position(1.0, 2.0), Position(3.0, 4.0)])
    assert list(line.coords) == [(2.0, 1.0), (4.0, 3.0)]


def test_polyline_needs_two_points():
    with pytest.raises(ValueError):
        coords_to_polyline([Position(1.0, 2.0)])
    with pytest.raises(ValueError):
        coords_to_polyline([])
