from __future__ import annotations

import math

from fuel_finder.services.types import GeoPoint

EARTH_RADIUS_MILES = 3959.0
METERS_PER_DEGREE = 111000.0


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1_rad = math.radians(lat1)
    lon1_rad = math.radians(lon1)
    lat2_rad = math.radians(lat2)
    lon2_rad = math.radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2.0) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def distance_miles(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_miles(a.latitude, a.longitude, b.latitude, b.longitude)


def bounding_box(center: GeoPoint, radius_meters: float) -> tuple[float, float, float, float]:
    """Return ``(south, west, north, east)`` around ``center``.

    The same degree delta is used on both axes, so the box gets narrower in
    real distance the further ``center`` is from the equator.
    """
    delta = radius_meters / METERS_PER_DEGREE
    return (
        center.latitude - delta,
        center.longitude - delta,
        center.latitude + delta,
        center.longitude + delta,
    )
