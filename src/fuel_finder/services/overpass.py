from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from django.conf import settings

from fuel_finder.exceptions import ExternalServiceError
from fuel_finder.services.formatting import format_address
from fuel_finder.services.geo import bounding_box, distance_miles
from fuel_finder.services.types import GeoPoint, Station

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_METERS = 5000.0
DEFAULT_STATION_NAME = "Gas Station"


def build_fuel_query(bbox: tuple[float, float, float, float]) -> str:
    box = ",".join(f"{value:.6f}" for value in bbox)
    return (
        "[out:json];\n"
        "(\n"
        f'  node["amenity"="fuel"]({box});\n'
        f'  way["amenity"="fuel"]({box});\n'
        ");\n"
        "out center;"
    )


def _coordinate(element: dict[str, Any], centroid: dict[str, Any], axis: str) -> float:
    value = centroid.get(axis)
    if value is None:
        value = element[axis]
    return float(value)


class OverpassClient:
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.base_url = settings.OVERPASS_BASE_URL.rstrip("/")
        self.timeout = settings.OVERPASS_TIMEOUT_SECONDS
        self.retry_count = settings.OVERPASS_RETRY_COUNT
        self.user_agent = settings.FUEL_FINDER_USER_AGENT
        self.transport = transport

    async def fetch_nearby_stations(
        self, center: GeoPoint, radius_meters: float = DEFAULT_RADIUS_METERS
    ) -> list[Station]:
        """Return fuel stations around ``center``, nearest first.

        Any upstream failure yields an empty list; the cause is only logged.
        """
        query = build_fuel_query(bounding_box(center, radius_meters))
        try:
            payload = await self._query(query)
            return self._parse_stations(payload, center)
        except ExternalServiceError as exc:
            logger.warning(
                "Station lookup near %.5f,%.5f failed: %s (cause: %r)",
                center.latitude,
                center.longitude,
                exc,
                exc.__cause__,
            )
            return []

    async def _query(self, query: str) -> Any:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            headers={"User-Agent": self.user_agent},
        ) as client:
            for attempt in range(self.retry_count + 1):
                try:
                    response = await client.post(
                        f"{self.base_url}/interpreter", data={"data": query}
                    )
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPError as exc:
                    if attempt >= self.retry_count:
                        raise ExternalServiceError("Overpass request failed") from exc
                    await asyncio.sleep(0.3 * (attempt + 1))
                except ValueError as exc:
                    raise ExternalServiceError("Overpass returned invalid JSON") from exc

        raise ExternalServiceError("Overpass request failed")

    @classmethod
    def _parse_stations(cls, payload: Any, center: GeoPoint) -> list[Station]:
        if not isinstance(payload, dict):
            raise ExternalServiceError("Invalid Overpass response")

        elements = payload.get("elements")
        if not isinstance(elements, list):
            raise ExternalServiceError("Overpass response has no elements")

        stations = []
        for element in elements:
            station = cls._build_station(element, center)
            if station is not None:
                stations.append(station)

        # sorted() is stable, so ties keep upstream order
        return sorted(stations, key=lambda station: station.distance_miles)

    @staticmethod
    def _build_station(element: Any, center: GeoPoint) -> Station | None:
        if not isinstance(element, dict):
            return None

        # Ways carry a computed centroid, nodes their own coordinate.
        centroid = element.get("center") if isinstance(element.get("center"), dict) else {}
        station_id = element.get("id")
        if not isinstance(station_id, (int, str)) or isinstance(station_id, bool):
            logger.debug("Skipping Overpass element without usable id: %s", element)
            return None

        try:
            point = GeoPoint(
                latitude=_coordinate(element, centroid, "lat"),
                longitude=_coordinate(element, centroid, "lon"),
            )
        except (KeyError, TypeError, ValueError):
            logger.debug("Skipping Overpass element without coordinates: %s", station_id)
            return None

        raw_tags = element.get("tags") if isinstance(element.get("tags"), dict) else {}
        tags = {str(key): str(value) for key, value in raw_tags.items() if value is not None}
        return Station(
            station_id=station_id,
            latitude=point.latitude,
            longitude=point.longitude,
            name=tags.get("name") or tags.get("brand") or DEFAULT_STATION_NAME,
            brand=tags.get("brand"),
            operator=tags.get("operator"),
            address=format_address(tags),
            distance_miles=distance_miles(center, point),
            raw_tags=tags,
        )


async def fetch_nearby_stations(
    center: GeoPoint, radius_meters: float = DEFAULT_RADIUS_METERS
) -> list[Station]:
    return await OverpassClient().fetch_nearby_stations(center, radius_meters)
