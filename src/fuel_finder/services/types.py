from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True, frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class Station:
    station_id: int | str
    latitude: float
    longitude: float
    name: str
    brand: str | None
    operator: str | None
    address: str | None
    # Relative to the coordinate of the fetch that built this record.
    distance_miles: float
    raw_tags: Mapping[str, str] = field(default_factory=dict)

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)


@dataclass(slots=True, frozen=True)
class Route:
    path: list[tuple[float, float]]
    distance_miles: float
    duration_minutes: float
    steps: list[dict[str, Any]]


@dataclass(slots=True, frozen=True)
class NearestStation:
    station: Station
    route: Route | None = None

    @property
    def duration_minutes(self) -> float | None:
        if self.route is None:
            return None
        return self.route.duration_minutes


@dataclass(slots=True, frozen=True)
class NearbyStations:
    center: GeoPoint
    stations: list[Station]
    nearest: NearestStation | None
