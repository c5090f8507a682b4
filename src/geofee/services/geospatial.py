"""Geospatial helper functions."""

from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.geo import Coordinate

EARTH_RADIUS_KM = 6371.0
METERS_PER_MILE = 1609.34
KM_PER_MILE = METERS_PER_MILE / 1000


class DistanceUnit(str, Enum):
    KILOMETERS = "km"
    MILES = "mi"
    METERS = "m"


def to_radians(degrees: float) -> float:
    return degrees * math.pi / 180


def is_valid_coordinates(lat: float, lng: float) -> bool:
    """Return True for finite numbers inside the WGS84 latitude/longitude ranges."""
    if isinstance(lat, bool) or isinstance(lng, bool):
        return False
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return False
    if math.isnan(lat) or math.isnan(lng):
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


def haversine_distance(a: "Coordinate", b: "Coordinate", unit: DistanceUnit = DistanceUnit.KILOMETERS) -> float:
    """Compute great-circle distance between two coordinates using the Haversine formula.

    The Earth radius is kept in kilometres only; other units are converted from it.
    """

    phi1, phi2 = to_radians(a.lat), to_radians(b.lat)
    d_phi = to_radians(b.lat - a.lat)
    d_lambda = to_radians(b.lng - a.lng)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    km = EARTH_RADIUS_KM * c
    return convert_distance(km, DistanceUnit.KILOMETERS, unit)


def haversine_distance_miles(a: "Coordinate", b: "Coordinate") -> float:
    return haversine_distance(a, b, DistanceUnit.MILES)


def haversine_distance_km(a: "Coordinate", b: "Coordinate") -> float:
    return haversine_distance(a, b, DistanceUnit.KILOMETERS)


def convert_distance(value: float, from_unit: DistanceUnit, to_unit: DistanceUnit) -> float:
    if from_unit == to_unit:
        return value
    km = {
        DistanceUnit.KILOMETERS: value,
        DistanceUnit.MILES: value * KM_PER_MILE,
        DistanceUnit.METERS: value / 1000,
    }[from_unit]
    return {
        DistanceUnit.KILOMETERS: km,
        DistanceUnit.MILES: km / KM_PER_MILE,
        DistanceUnit.METERS: km * 1000,
    }[to_unit]


def is_within_radius(point: "Coordinate", center: "Coordinate", radius_miles: float) -> bool:
    return haversine_distance_miles(point, center) <= radius_miles


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE
