from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from django.conf import settings

from fuel_finder.exceptions import ExternalServiceError, InvalidLocationError
from fuel_finder.services.types import GeoPoint

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown location"
ADDRESS_FIELDS = ("road", "neighbourhood", "suburb", "city")


class ReverseGeocodingClient:
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.base_url = settings.GEOCODING_BASE_URL.rstrip("/")
        self.timeout = settings.GEOCODING_TIMEOUT_SECONDS
        self.retry_count = settings.GEOCODING_RETRY_COUNT
        self.user_agent = settings.FUEL_FINDER_USER_AGENT
        self.transport = transport

    async def describe(self, point: GeoPoint) -> str:
        """Return a short human-readable label for ``point``."""
        try:
            payload = await self._reverse(point)
            return self._parse_label(payload)
        except InvalidLocationError:
            return UNKNOWN_LOCATION
        except ExternalServiceError as exc:
            logger.warning("Reverse geocoding failed: %s (cause: %r)", exc, exc.__cause__)
            return UNKNOWN_LOCATION

    async def _reverse(self, point: GeoPoint) -> Any:
        params = {
            "format": "json",
            "lat": point.latitude,
            "lon": point.longitude,
            "zoom": 18,
            "addressdetails": 1,
        }

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            headers={
                "Accept": "application/json",
                "User-Agent": self.user_agent,
            },
        ) as client:
            for attempt in range(self.retry_count + 1):
                try:
                    response = await client.get(f"{self.base_url}/reverse", params=params)
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPError as exc:
                    if attempt >= self.retry_count:
                        raise ExternalServiceError("Geocoding request failed") from exc
                    await asyncio.sleep(0.3 * (attempt + 1))
                except ValueError as exc:
                    raise ExternalServiceError("Geocoding returned invalid JSON") from exc

        raise ExternalServiceError("Geocoding request failed")

    @staticmethod
    def _parse_label(payload: Any) -> str:
        if not isinstance(payload, dict) or not isinstance(payload.get("address"), dict):
            raise InvalidLocationError("Location could not be resolved")

        address = payload["address"]
        for field in ADDRESS_FIELDS:
            if address.get(field):
                return str(address[field])
        return UNKNOWN_LOCATION
