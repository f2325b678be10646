from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from urllib.parse import urlencode

from django.utils import timezone

from fuel_finder.services.types import GeoPoint

FEET_PER_MILE = 5280
FEET_THRESHOLD_MILES = 0.1
MILE_LABEL_PRECISION = Decimal("0.1")
ADDRESS_KEYS = ("housenumber", "street", "city")
DIRECTIONS_BASE_URL = "https://www.google.com/maps/dir/"


def format_address(tags: Mapping[str, str] | None) -> str | None:
    if tags is None:
        return None

    parts = []
    for key in ADDRESS_KEYS:
        value = tags.get(f"addr:{key}") or tags.get(key)
        if value:
            parts.append(str(value))

    return ", ".join(parts) if parts else None


def format_eta(duration_minutes: float, now: datetime | None = None) -> str:
    """Render ``now + duration_minutes`` as a 12-hour clock string, e.g. ``2:45 PM``."""
    if now is None:
        now = timezone.localtime()
    eta = now + timedelta(minutes=duration_minutes)
    hour = eta.hour % 12 or 12
    meridiem = "AM" if eta.hour < 12 else "PM"
    return f"{hour}:{eta.minute:02d} {meridiem}"


def format_distance_label(miles: float) -> str:
    if miles < FEET_THRESHOLD_MILES:
        # halves round up in both branches
        return f"{math.floor(miles * FEET_PER_MILE + 0.5)} ft"
    tenths = Decimal(repr(miles)).quantize(MILE_LABEL_PRECISION, rounding=ROUND_HALF_UP)
    return f"{tenths} mi"


def format_drive_time(duration_minutes: float) -> str:
    return f"~{math.ceil(duration_minutes)} min"


def directions_url(origin: GeoPoint, destination: GeoPoint) -> str:
    params = {
        "api": 1,
        "origin": f"{origin.latitude},{origin.longitude}",
        "destination": f"{destination.latitude},{destination.longitude}",
        "travelmode": "driving",
    }
    return f"{DIRECTIONS_BASE_URL}?{urlencode(params, safe=',')}"
