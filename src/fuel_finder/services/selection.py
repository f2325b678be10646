from __future__ import annotations

from collections.abc import Sequence

from fuel_finder.services.types import Station


def nearest(stations: Sequence[Station] | None) -> Station | None:
    """Return the first station of a sequence already sorted by distance."""
    if not stations:
        return None
    return stations[0]
