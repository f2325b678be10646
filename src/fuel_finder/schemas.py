from __future__ import annotations

from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class LocationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class NearbyStationsRequest(LocationRequest):
    radius_meters: float | None = Field(default=None, gt=0.0)
    # IANA zone of the caller, used to render the arrival clock time
    tz: str | None = Field(default=None, max_length=64)

    @field_validator("tz")
    @classmethod
    def _check_time_zone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown time zone: {value}") from exc
        return value

    @model_validator(mode="after")
    def _apply_radius_bounds(self) -> NearbyStationsRequest:
        if self.radius_meters is None:
            self.radius_meters = float(settings.DEFAULT_SEARCH_RADIUS_METERS)
        if self.radius_meters > settings.MAX_SEARCH_RADIUS_METERS:
            raise ValueError(
                f"radius_meters must not exceed {settings.MAX_SEARCH_RADIUS_METERS}"
            )
        return self


class Coordinate(BaseModel):
    latitude: float
    longitude: float


class StationResponse(BaseModel):
    station_id: int | str
    name: str
    brand: str | None
    operator: str | None
    address: str | None
    latitude: float
    longitude: float
    distance_miles: float
    distance_label: str
    tags: dict[str, str]


class RouteResponse(BaseModel):
    path: list[tuple[float, float]]
    distance_miles: float
    duration_minutes: float
    steps: list[dict[str, Any]]


class NearestStationResponse(BaseModel):
    station: StationResponse
    route: RouteResponse | None
    eta: str | None
    drive_time: str | None
    directions_url: str


class NearbyStationsResponse(BaseModel):
    center: Coordinate
    count: int
    stations: list[StationResponse]
    nearest: NearestStationResponse | None


class LocationResponse(BaseModel):
    center: Coordinate
    address: str
