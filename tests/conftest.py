"""Shared fixtures: test settings and fake upstream APIs behind httpx.MockTransport."""
import asyncio

import httpx
import pytest

from roadtrip.config import Settings
from roadtrip.services.trip_planner import TripPlanner


# Place name -> [lon, lat]
PLACES = {
    "Paris, France": [2.3522, 48.8566],
    "Lyon, France": [4.8357, 45.764],
    "São Paulo, Brazil": [-46.63, -23.55],
    "Rio de Janeiro, Brazil": [-43.17, -22.91],
}

MAP_BYTES = b"\x89PNG\r\n\x1a\nfake-map"


def make_settings(**overrides) -> Settings:
    values = {
        "geoapify_api_key": "geo-key",
        "spotify_client_id": "client-id",
        "spotify_client_secret": "client-secret",
        "openweather_api_key": "weather-key",
        "music_page_size": 6,
    }
    values.update(overrides)
    return Settings(**values)


def make_track(index: int, with_cover: bool = True) -> dict:
    return {
        "id": f"id{index}",
        "name": f"Track {index}",
        "external_urls": {"spotify": f"https://open.spotify.com/track/{index}"},
        "album": {
            "images": [{"url": f"https://i.scdn.co/image/{index}"}] if with_cover else []
        },
    }


class FakeUpstreams:
    """Canned Geoapify, OpenWeatherMap and Spotify responses."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.places = dict(PLACES)
        self.route_features = None  # None -> build a route from the waypoints
        self.map_status = 200
        self.map_content_type = "image/png"
        self.weather_status = 200
        self.weather_payload = {
            "weather": [{"description": "clear sky"}],
            "main": {"temp": 21.4},
        }
        self.token_payload = {"access_token": "token-123", "token_type": "Bearer"}
        self.search_status = 200
        self.failing_offsets: set[int] = set()
        self.track_total = 40
        # Offset -> raw JSON body returned instead of the generated page
        self.search_payloads: dict[int, object] = {}
        # Requests whose key is in gates wait for the event before answering
        self.gates: dict[str, asyncio.Event] = {}
        self.waiting: set[str] = set()
        self.cancelled: set[str] = set()

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def search_offsets(self) -> list[int]:
        return [int(r.url.params["offset"]) for r in self.requests_to("/v1/search")]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        params = request.url.params

        if path == "/v1/geocode/search":
            await self._gate(f"geocode:{params['text']}")
            return self._geocode(params["text"])
        if path == "/v1/routing":
            return self._route(params["waypoints"])
        if path == "/v1/staticmap":
            if self.map_status != 200:
                return httpx.Response(self.map_status, json={"message": "render error"})
            return httpx.Response(
                200,
                content=MAP_BYTES,
                headers={"content-type": self.map_content_type}
            )
        if path == "/data/2.5/weather":
            return httpx.Response(self.weather_status, json=self.weather_payload)
        if path == "/api/token":
            return httpx.Response(200, json=self.token_payload)
        if path == "/v1/search":
            offset = int(params["offset"])
            await self._gate(f"search:{offset}")
            if self.search_status != 200 or offset in self.failing_offsets:
                return httpx.Response(self.search_status if self.search_status != 200 else 502)
            if offset in self.search_payloads:
                return httpx.Response(200, json=self.search_payloads[offset])
            return self._search(offset, int(params["limit"]))

        return httpx.Response(404)

    async def _gate(self, key: str):
        gate = self.gates.get(key)
        if gate is not None:
            self.waiting.add(key)
            try:
                await gate.wait()
            except asyncio.CancelledError:
                self.cancelled.add(key)
                raise

    def _geocode(self, text: str) -> httpx.Response:
        coords = self.places.get(text)
        features = []
        if coords is not None:
            features.append({
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": coords},
                "properties": {"formatted": text},
            })
        return httpx.Response(200, json={"type": "FeatureCollection", "features": features})

    def _route(self, waypoints: str) -> httpx.Response:
        if self.route_features is not None:
            return httpx.Response(200, json={"features": self.route_features})

        locations = []
        for pair in waypoints.split("|"):
            lat, lon = (float(v) for v in pair.split(","))
            locations.append({"location": [lon, lat]})
        feature = {
            "type": "Feature",
            "properties": {
                "mode": "drive",
                "distance": 465300,
                "time": 16740.5,
                "waypoints": locations,
            },
            "geometry": {
                "type": "MultiLineString",
                "coordinates": [[w["location"] for w in locations]],
            },
        }
        return httpx.Response(200, json={"type": "FeatureCollection", "features": [feature]})

    def _search(self, offset: int, limit: int) -> httpx.Response:
        end = min(offset + limit, self.track_total)
        items = [make_track(i) for i in range(offset, end)]
        return httpx.Response(200, json={"tracks": {"items": items, "offset": offset}})


async def wait_until(predicate, attempts: int = 200):
    """Yield to the event loop until predicate() holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep real keys and overrides in the environment out of the tests."""
    for name in Settings.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)


@pytest.fixture
def upstreams():
    return FakeUpstreams()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def http_client(upstreams):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstreams.handler))


@pytest.fixture
def planner(http_client, settings):
    return TripPlanner(http_client, settings)
