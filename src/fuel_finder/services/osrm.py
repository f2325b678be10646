from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from django.conf import settings

from fuel_finder.exceptions import ExternalServiceError, NoRouteFoundError
from fuel_finder.services.types import GeoPoint, Route

logger = logging.getLogger(__name__)

METERS_PER_MILE = 1609.34


class OsrmClient:
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.base_url = settings.OSRM_BASE_URL.rstrip("/")
        self.timeout = settings.OSRM_TIMEOUT_SECONDS
        self.retry_count = settings.OSRM_RETRY_COUNT
        self.user_agent = settings.FUEL_FINDER_USER_AGENT
        self.transport = transport

    async def fetch_route(self, start: GeoPoint, end: GeoPoint) -> Route | None:
        try:
            payload = await self._request(start, end)
            return self._parse_response(payload)
        except (ExternalServiceError, NoRouteFoundError) as exc:
            logger.warning("Route lookup failed: %s (cause: %r)", exc, exc.__cause__)
            return None

    async def _request(self, start: GeoPoint, end: GeoPoint) -> Any:
        coordinates = f"{start.longitude},{start.latitude};{end.longitude},{end.latitude}"
        endpoint = f"{self.base_url}/route/v1/driving/{coordinates}"
        params = {
            "overview": "full",
            "geometries": "geojson",
            "steps": "true",
        }

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            headers={"User-Agent": self.user_agent},
        ) as client:
            for attempt in range(self.retry_count + 1):
                try:
                    response = await client.get(endpoint, params=params)
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPError as exc:
                    if attempt >= self.retry_count:
                        raise ExternalServiceError("OSRM request failed") from exc
                    await asyncio.sleep(0.3 * (attempt + 1))
                except ValueError as exc:
                    raise ExternalServiceError("OSRM returned invalid JSON") from exc

        raise ExternalServiceError("OSRM request failed")

    @staticmethod
    def _parse_response(payload: Any) -> Route:
        if not isinstance(payload, dict) or payload.get("code") != "Ok":
            raise NoRouteFoundError("Could not compute route")

        routes = payload.get("routes") or []
        if not isinstance(routes, list):
            raise ExternalServiceError("Malformed OSRM routes")
        if not routes:
            raise NoRouteFoundError("Could not compute route")

        first = routes[0]
        if not isinstance(first, dict):
            raise ExternalServiceError("Malformed OSRM route")
        try:
            # OSRM returns [lon, lat] pairs
            path = [(float(coord[1]), float(coord[0])) for coord in first["geometry"]["coordinates"]]
            distance_miles = float(first["distance"]) / METERS_PER_MILE
            duration_minutes = float(first["duration"]) / 60.0
            legs = first.get("legs") or []
            steps = list(legs[0].get("steps") or []) if legs else []
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
            raise ExternalServiceError("Malformed OSRM route") from exc

        if not all(isinstance(step, dict) for step in steps):
            raise ExternalServiceError("Malformed OSRM steps")
        return Route(
            path=path,
            distance_miles=distance_miles,
            duration_minutes=duration_minutes,
            steps=steps,
        )


async def fetch_route(start: GeoPoint, end: GeoPoint) -> Route | None:
    return await OsrmClient().fetch_route(start, end)
