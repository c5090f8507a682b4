import math

import pytest

from src.geofee.errors import ValidationError
from src.geofee.models.geo import Coordinate
from src.geofee.services.geospatial import (
    DistanceUnit,
    convert_distance,
    haversine_distance,
    haversine_distance_km,
    haversine_distance_miles,
    is_valid_coordinates,
    is_within_radius,
    to_radians,
)

GOOGLEPLEX = Coordinate(37.4224764, -122.0842499)
SAN_FRANCISCO = Coordinate(37.7749, -122.4194)
LONDON = Coordinate(51.5074, -0.1278)
NEW_YORK = Coordinate(40.7128, -74.0060)


def test_to_radians():
    assert to_radians(180) == pytest.approx(math.pi)
    assert to_radians(-90) == pytest.approx(-math.pi / 2)


def test_distance_is_symmetric():
    pairs = [(GOOGLEPLEX, SAN_FRANCISCO), (LONDON, NEW_YORK), (SAN_FRANCISCO, LONDON)]
    for a, b in pairs:
        assert haversine_distance_miles(a, b) == pytest.approx(haversine_distance_miles(b, a))
        assert haversine_distance_km(a, b) == pytest.approx(haversine_distance_km(b, a))


def test_distance_to_self_is_zero():
    assert haversine_distance_miles(GOOGLEPLEX, GOOGLEPLEX) == 0


def test_known_distance_london_new_york():
    # Roughly 5570 km / 3461 mi great-circle
    assert haversine_distance_km(LONDON, NEW_YORK) == pytest.approx(5570, rel=0.01)
    assert haversine_distance_miles(LONDON, NEW_YORK) == pytest.approx(3461, rel=0.01)


def test_units_agree_through_single_radius():
    km = haversine_distance(GOOGLEPLEX, SAN_FRANCISCO, DistanceUnit.KILOMETERS)
    miles = haversine_distance(GOOGLEPLEX, SAN_FRANCISCO, DistanceUnit.MILES)
    meters = haversine_distance(GOOGLEPLEX, SAN_FRANCISCO, DistanceUnit.METERS)
    assert convert_distance(miles, DistanceUnit.MILES, DistanceUnit.KILOMETERS) == pytest.approx(km)
    assert meters == pytest.approx(km * 1000)
    # Matches the 3959-mile radius formulation within a small tolerance
    assert miles == pytest.approx(km * 3959 / 6371, rel=1e-3)


def test_is_within_radius():
    distance = haversine_distance_miles(GOOGLEPLEX, SAN_FRANCISCO)
    assert is_within_radius(SAN_FRANCISCO, GOOGLEPLEX, distance + 0.01)
    assert not is_within_radius(SAN_FRANCISCO, GOOGLEPLEX, distance - 0.01)


@pytest.mark.parametrize(
    "lat,lng,expected",
    [
        (0, 0, True),
        (90, 180, True),
        (-90, -180, True),
        (90.0001, 0, False),
        (0, -180.5, False),
        (float("nan"), 0, False),
        ("10", 10, False),
        (True, 10, False),
    ],
)
def test_is_valid_coordinates(lat, lng, expected):
    assert is_valid_coordinates(lat, lng) is expected


def test_coordinate_rejects_out_of_range():
    with pytest.raises(ValidationError):
        Coordinate(91, 0)
