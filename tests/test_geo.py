from __future__ import annotations

import math

import pytest

from fuel_finder.services.geo import (
    EARTH_RADIUS_MILES,
    bounding_box,
    distance_miles,
    haversine_miles,
)
from fuel_finder.services.types import GeoPoint

MADISON = GeoPoint(latitude=43.0731, longitude=-89.4012)
NEW_YORK = GeoPoint(latitude=40.7128, longitude=-74.0060)
LOS_ANGELES = GeoPoint(latitude=34.0522, longitude=-118.2437)


def test_distance_to_same_point_is_zero() -> None:
    assert distance_miles(MADISON, MADISON) == pytest.approx(0.0, abs=1e-9)


def test_distance_is_symmetric() -> None:
    assert distance_miles(NEW_YORK, LOS_ANGELES) == pytest.approx(
        distance_miles(LOS_ANGELES, NEW_YORK)
    )


def test_distance_matches_known_city_pair() -> None:
    assert distance_miles(NEW_YORK, LOS_ANGELES) == pytest.approx(2445.0, rel=0.005)


def test_forty_miles_along_meridian() -> None:
    delta_degrees = math.degrees(40.0 / EARTH_RADIUS_MILES)

    result = haversine_miles(43.0, -89.0, 43.0 + delta_degrees, -89.0)

    assert result == pytest.approx(40.0, rel=0.005)


def test_distance_grows_with_separation() -> None:
    near = GeoPoint(latitude=43.08, longitude=-89.4012)
    far = GeoPoint(latitude=43.20, longitude=-89.4012)

    assert distance_miles(MADISON, near) < distance_miles(MADISON, far)


def test_bounding_box_uses_fixed_degree_delta() -> None:
    south, west, north, east = bounding_box(MADISON, 5000)
    delta = 5000 / 111000

    assert south == pytest.approx(MADISON.latitude - delta)
    assert west == pytest.approx(MADISON.longitude - delta)
    assert north == pytest.approx(MADISON.latitude + delta)
    assert east == pytest.approx(MADISON.longitude + delta)
