from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest
from django.test import Client


@pytest.fixture
def api_client() -> Client:
    return Client()


@pytest.fixture
def json_transport() -> Callable[..., httpx.MockTransport]:
    """Build a transport that answers every request with the given JSON payload.

    Requests are appended to ``transport.requests`` for inspection.
    """

    def factory(payload: Any, status_code: int = 200) -> httpx.MockTransport:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(status_code, json=payload)

        transport = httpx.MockTransport(handler)
        transport.requests = requests  # type: ignore[attr-defined]
        return transport

    return factory


@pytest.fixture
def failing_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


@pytest.fixture(autouse=True)
def _no_retries(settings) -> None:
    settings.OVERPASS_RETRY_COUNT = 0
    settings.OSRM_RETRY_COUNT = 0
    settings.GEOCODING_RETRY_COUNT = 0
