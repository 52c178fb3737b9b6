"""Shared fixtures: a fake api.weather.gov behind httpx.MockTransport."""

import functools
import json
from typing import Optional

import httpx
import pytest

from core import nws

BASE = "https://nws.test"


class FakeNWS:
    """Answers /points/{coord} with links back to itself.

    The forecast documents behind those links answer with ``status`` and
    ``payload``, or with a per-coordinate override from ``set_response``.
    """

    def __init__(self):
        self.status = 200
        self.payload = "{}"
        self.overrides: dict[str, tuple[int, str]] = {}
        self.points_override: Optional[dict] = None
        self.requests: list[httpx.Request] = []

    def serve(self, status: int, payload) -> None:
        self.status = status
        self.payload = payload if isinstance(payload, str) else json.dumps(payload)

    def set_response(self, latitude: str, longitude: str, status: int, payload) -> None:
        text = payload if isinstance(payload, str) else json.dumps(payload)
        self.overrides[f"{latitude},{longitude}"] = (status, text)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith("/points/"):
            coord = path[len("/points/"):]
            if self.points_override is not None:
                return httpx.Response(200, json=self.points_override)
            return httpx.Response(
                200,
                json={
                    "forecast": f"{BASE}/forecast/{coord}",
                    "forecastHourly": f"{BASE}/hourly/{coord}",
                    "forecastGridData": f"{BASE}/grid/{coord}",
                },
            )
        coord = path.rsplit("/", 1)[-1]
        status, text = self.overrides.get(coord, (self.status, self.payload))
        return httpx.Response(status, text=text)


@pytest.fixture
def fake_nws(monkeypatch) -> FakeNWS:
    fake = FakeNWS()
    monkeypatch.setattr(nws, "NWS_API_BASE", BASE)
    monkeypatch.setattr(
        nws, "_client", functools.partial(nws._client, transport=httpx.MockTransport(fake.handler))
    )
    return fake
