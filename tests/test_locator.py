from __future__ import annotations

from datetime import UTC, datetime

import pytest

from fuel_finder.schemas import LocationRequest, NearbyStationsRequest
from fuel_finder.services.locator import StationLocator
from fuel_finder.services.types import GeoPoint, Route, Station

CENTER = GeoPoint(latitude=43.0731, longitude=-89.4012)


def _station(station_id: int, distance: float, latitude: float = 43.08) -> Station:
    return Station(
        station_id=station_id,
        latitude=latitude,
        longitude=-89.40,
        name=f"Station {station_id}",
        brand="Kwik Trip",
        operator=None,
        address="1 Main St, Madison",
        distance_miles=distance,
        raw_tags={"amenity": "fuel", "brand": "Kwik Trip"},
    )


ROUTE = Route(
    path=[(43.0731, -89.4012), (43.08, -89.40)],
    distance_miles=0.61234,
    duration_minutes=2.4,
    steps=[{"name": "Park St"}],
)


@pytest.fixture
def clients(mocker):
    overpass_client = mocker.Mock()
    overpass_client.fetch_nearby_stations = mocker.AsyncMock(
        return_value=[_station(1, 0.05), _station(2, 1.75, latitude=43.1)]
    )
    osrm_client = mocker.Mock()
    osrm_client.fetch_route = mocker.AsyncMock(return_value=ROUTE)
    geocoding_client = mocker.Mock()
    geocoding_client.describe = mocker.AsyncMock(return_value="State Street")
    return overpass_client, osrm_client, geocoding_client


def _locator(clients) -> StationLocator:
    overpass_client, osrm_client, geocoding_client = clients
    return StationLocator(
        overpass_client=overpass_client,
        osrm_client=osrm_client,
        geocoding_client=geocoding_client,
    )


@pytest.mark.asyncio
async def test_locate_routes_to_first_station(clients) -> None:
    overpass_client, osrm_client, _ = clients

    result = await _locator(clients).locate(CENTER, 8000)

    overpass_client.fetch_nearby_stations.assert_awaited_once_with(CENTER, 8000)
    osrm_client.fetch_route.assert_awaited_once_with(
        CENTER, GeoPoint(latitude=43.08, longitude=-89.40)
    )
    assert len(result.stations) == 2
    assert result.nearest is not None
    assert result.nearest.station.station_id == 1
    assert result.nearest.route is ROUTE
    assert result.nearest.duration_minutes == 2.4


@pytest.mark.asyncio
async def test_locate_without_stations_skips_routing(clients) -> None:
    overpass_client, osrm_client, _ = clients
    overpass_client.fetch_nearby_stations.return_value = []

    result = await _locator(clients).locate(CENTER, 8000)

    assert result.stations == []
    assert result.nearest is None
    osrm_client.fetch_route.assert_not_awaited()


@pytest.mark.asyncio
async def test_locate_keeps_station_when_route_is_missing(clients) -> None:
    _, osrm_client, _ = clients
    osrm_client.fetch_route.return_value = None

    result = await _locator(clients).locate(CENTER, 8000)

    assert result.nearest is not None
    assert result.nearest.route is None
    assert result.nearest.duration_minutes is None


@pytest.mark.asyncio
async def test_nearby_builds_display_response(clients) -> None:
    request = NearbyStationsRequest(latitude=43.0731, longitude=-89.4012)

    response = await _locator(clients).nearby(request, now=datetime(2024, 5, 1, 14, 30))

    assert response.count == 2
    assert [station.distance_label for station in response.stations] == ["264 ft", "1.8 mi"]
    assert response.stations[0].tags == {"amenity": "fuel", "brand": "Kwik Trip"}
    nearest = response.nearest
    assert nearest is not None
    assert nearest.station.station_id == 1
    assert nearest.route is not None
    assert nearest.route.distance_miles == 0.612
    assert nearest.route.path == [(43.0731, -89.4012), (43.08, -89.40)]
    assert nearest.eta == "2:32 PM"
    assert nearest.drive_time == "~3 min"
    assert "destination=43.08,-89.4" in nearest.directions_url


@pytest.mark.asyncio
async def test_nearby_without_route_has_no_eta(clients) -> None:
    _, osrm_client, _ = clients
    osrm_client.fetch_route.return_value = None
    request = NearbyStationsRequest(latitude=43.0731, longitude=-89.4012, radius_meters=3000)

    response = await _locator(clients).nearby(request)

    assert response.nearest is not None
    assert response.nearest.route is None
    assert response.nearest.eta is None
    assert response.nearest.drive_time is None


@pytest.mark.asyncio
async def test_describe_location_uses_reverse_geocoder(clients) -> None:
    _, _, geocoding_client = clients

    response = await _locator(clients).describe_location(
        LocationRequest(latitude=43.0731, longitude=-89.4012)
    )

    assert response.address == "State Street"
    geocoding_client.describe.assert_awaited_once_with(CENTER)


@pytest.mark.asyncio
async def test_nearby_renders_eta_in_caller_time_zone(clients, mocker) -> None:
    mocker.patch(
        "django.utils.timezone.now", return_value=datetime(2024, 5, 1, 19, 30, tzinfo=UTC)
    )
    request = NearbyStationsRequest(
        latitude=43.0731, longitude=-89.4012, tz="America/Chicago"
    )

    response = await _locator(clients).nearby(request)

    assert response.nearest is not None
    assert response.nearest.eta == "2:32 PM"


def test_nearby_request_rejects_unknown_time_zone() -> None:
    with pytest.raises(ValueError):
        NearbyStationsRequest(latitude=43.0731, longitude=-89.4012, tz="Mars/Olympus_Mons")
