from __future__ import annotations

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from django.utils import timezone

from fuel_finder.schemas import (
    Coordinate,
    LocationRequest,
    LocationResponse,
    NearbyStationsRequest,
    NearbyStationsResponse,
    NearestStationResponse,
    RouteResponse,
    StationResponse,
)
from fuel_finder.services.formatting import (
    directions_url,
    format_distance_label,
    format_drive_time,
    format_eta,
)
from fuel_finder.services.geocoding import ReverseGeocodingClient
from fuel_finder.services.osrm import OsrmClient
from fuel_finder.services.overpass import OverpassClient
from fuel_finder.services.selection import nearest
from fuel_finder.services.types import GeoPoint, NearbyStations, NearestStation, Station

logger = logging.getLogger(__name__)


class StationLocator:
    def __init__(
        self,
        overpass_client: OverpassClient | None = None,
        osrm_client: OsrmClient | None = None,
        geocoding_client: ReverseGeocodingClient | None = None,
    ) -> None:
        self.overpass_client = overpass_client or OverpassClient()
        self.osrm_client = osrm_client or OsrmClient()
        self.geocoding_client = geocoding_client or ReverseGeocodingClient()

    async def locate(self, center: GeoPoint, radius_meters: float) -> NearbyStations:
        stations = await self.overpass_client.fetch_nearby_stations(center, radius_meters)
        closest = nearest(stations)
        if closest is None:
            logger.info(
                "No stations within %.0f m of %.5f,%.5f",
                radius_meters,
                center.latitude,
                center.longitude,
            )
            return NearbyStations(center=center, stations=stations, nearest=None)

        route = await self.osrm_client.fetch_route(center, closest.point)
        return NearbyStations(
            center=center,
            stations=stations,
            nearest=NearestStation(station=closest, route=route),
        )

    async def nearby(
        self, request: NearbyStationsRequest, now: datetime | None = None
    ) -> NearbyStationsResponse:
        center = GeoPoint(latitude=request.latitude, longitude=request.longitude)
        result = await self.locate(center, float(request.radius_meters))
        if now is None and request.tz is not None:
            now = timezone.localtime(timezone=ZoneInfo(request.tz))

        return NearbyStationsResponse(
            center=Coordinate(latitude=center.latitude, longitude=center.longitude),
            count=len(result.stations),
            stations=[_station_response(station) for station in result.stations],
            nearest=_nearest_response(center, result.nearest, now),
        )

    async def describe_location(self, request: LocationRequest) -> LocationResponse:
        center = GeoPoint(latitude=request.latitude, longitude=request.longitude)
        address = await self.geocoding_client.describe(center)
        return LocationResponse(
            center=Coordinate(latitude=center.latitude, longitude=center.longitude),
            address=address,
        )


def _station_response(station: Station) -> StationResponse:
    return StationResponse(
        station_id=station.station_id,
        name=station.name,
        brand=station.brand,
        operator=station.operator,
        address=station.address,
        latitude=station.latitude,
        longitude=station.longitude,
        distance_miles=round(station.distance_miles, 3),
        distance_label=format_distance_label(station.distance_miles),
        tags=dict(station.raw_tags),
    )


def _nearest_response(
    center: GeoPoint, nearest_station: NearestStation | None, now: datetime | None
) -> NearestStationResponse | None:
    if nearest_station is None:
        return None

    route = nearest_station.route
    route_response = None
    eta = None
    drive_time = None
    if route is not None:
        route_response = RouteResponse(
            path=route.path,
            distance_miles=round(route.distance_miles, 3),
            duration_minutes=round(route.duration_minutes, 2),
            steps=route.steps,
        )
        eta = format_eta(route.duration_minutes, now=now)
        drive_time = format_drive_time(route.duration_minutes)

    return NearestStationResponse(
        station=_station_response(nearest_station.station),
        route=route_response,
        eta=eta,
        drive_time=drive_time,
        directions_url=directions_url(center, nearest_station.station.point),
    )
