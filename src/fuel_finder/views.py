from __future__ import annotations

from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_GET
from pydantic import ValidationError

from fuel_finder.schemas import LocationRequest, NearbyStationsRequest
from fuel_finder.services.locator import StationLocator

_station_locator: StationLocator | None = None


def get_station_locator() -> StationLocator:
    global _station_locator
    if _station_locator is None:
        _station_locator = StationLocator()
    return _station_locator


@require_GET
async def health_view(_: HttpRequest) -> HttpResponse:
    return JsonResponse({"status": "ok"})


@require_GET
async def nearby_stations_view(request: HttpRequest) -> HttpResponse:
    try:
        stations_request = NearbyStationsRequest.model_validate(_query_params(request))
    except ValidationError as exc:
        return _validation_error_response(exc)

    locator = get_station_locator()
    response = await locator.nearby(stations_request)
    return JsonResponse(response.model_dump(mode="json"), status=200)


@require_GET
async def location_view(request: HttpRequest) -> HttpResponse:
    try:
        location_request = LocationRequest.model_validate(_query_params(request))
    except ValidationError as exc:
        return _validation_error_response(exc)

    locator = get_station_locator()
    response = await locator.describe_location(location_request)
    return JsonResponse(response.model_dump(mode="json"), status=200)


def _query_params(request: HttpRequest) -> dict[str, Any]:
    return {key: value for key, value in request.GET.items() if value != ""}


def _validation_error_response(exc: ValidationError) -> JsonResponse:
    return JsonResponse(
        {
            "error": {
                "code": "validation_error",
                "message": "Invalid request parameters",
                "details": exc.errors(include_url=False, include_context=False),
            }
        },
        status=400,
    )
