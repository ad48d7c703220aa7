"""Tests for static map rendering and weather."""
import base64
import copy
import json

import pytest

from roadtrip.exceptions import RenderFailed, WeatherUnavailable
from roadtrip.models.trip import Coordinate
from roadtrip.services.static_map import MapRenderer, build_render_request
from roadtrip.services.weather import WeatherClient

from conftest import MAP_BYTES, make_settings


ROUTE_GEOMETRY = {
    "type": "Feature",
    "properties": {
        "distance": 465300,
        "time": 16740,
        "waypoints": [
            {"location": [2.3522, 48.8566]},
            {"location": [4.8357, 45.764]},
        ],
    },
    "geometry": {"type": "MultiLineString", "coordinates": [[[2.3522, 48.8566], [4.8357, 45.764]]]},
}


class TestRenderRequest:
    """Test building the static map request body."""

    def test_route_styling_added_to_a_copy(self):
        geometry = copy.deepcopy(ROUTE_GEOMETRY)

        body = build_render_request(geometry)

        assert body["geojson"]["properties"]["linecolor"] == "#2563eb"
        assert body["geojson"]["properties"]["linewidth"] == "6"
        assert geometry == ROUTE_GEOMETRY

    def test_one_marker_per_waypoint(self):
        body = build_render_request(ROUTE_GEOMETRY)

        assert body["markers"] == [
            {"lat": 48.8566, "lon": 2.3522, "color": "#ef4444", "size": "medium", "type": "awesome"},
            {"lat": 45.764, "lon": 4.8357, "color": "#ef4444", "size": "medium", "type": "awesome"},
        ]

    def test_fallback_markers_without_waypoints(self):
        geometry = {"type": "Feature", "properties": {}, "geometry": {}}

        body = build_render_request(geometry, [Coordinate(lon=1.0, lat=2.0)])

        assert [(m["lat"], m["lon"]) for m in body["markers"]] == [(2.0, 1.0)]

    def test_canvas_defaults(self):
        body = build_render_request(ROUTE_GEOMETRY)

        assert body["style"] == "osm-bright"
        assert (body["width"], body["height"], body["scaleFactor"]) == (900, 450, 2)


class TestMapRenderer:
    """Test rendering through the static map API."""

    @pytest.mark.asyncio
    async def test_render_returns_data_url(self, http_client, settings, upstreams):
        renderer = MapRenderer(http_client, settings)

        image = await renderer.render(ROUTE_GEOMETRY)

        assert image.content_type == "image/png"
        assert base64.b64decode(image.data) == MAP_BYTES
        assert image.data_url.startswith("data:image/png;base64,")

        request = upstreams.requests_to("/v1/staticmap")[0]
        assert request.method == "POST"
        assert request.url.params["apiKey"] == "geo-key"
        assert json.loads(request.content)["geojson"]["properties"]["linecolor"] == "#2563eb"

    @pytest.mark.asyncio
    async def test_http_error(self, http_client, settings, upstreams):
        upstreams.map_status = 500
        renderer = MapRenderer(http_client, settings)

        with pytest.raises(RenderFailed):
            await renderer.render(ROUTE_GEOMETRY)

    @pytest.mark.asyncio
    async def test_non_image_response(self, http_client, settings, upstreams):
        upstreams.map_content_type = "application/json"
        renderer = MapRenderer(http_client, settings)

        with pytest.raises(RenderFailed):
            await renderer.render(ROUTE_GEOMETRY)


class TestWeatherClient:
    """Test current weather lookup."""

    @pytest.mark.asyncio
    async def test_snapshot(self, http_client, settings, upstreams):
        client = WeatherClient(http_client, settings)

        snapshot = await client.fetch_weather(Coordinate(lon=4.8357, lat=45.764))

        assert snapshot.description == "clear sky"
        assert snapshot.temperature_celsius == 21.4

        params = upstreams.requests_to("/data/2.5/weather")[0].url.params
        assert params["lat"] == "45.764"
        assert params["lon"] == "4.8357"
        assert params["units"] == "metric"
        assert params["lang"] == "en"
        assert params["appid"] == "weather-key"

    @pytest.mark.asyncio
    async def test_missing_fields_use_placeholders(self, http_client, settings, upstreams):
        upstreams.weather_payload = {"weather": [], "main": {}}
        client = WeatherClient(http_client, settings)

        snapshot = await client.fetch_weather(Coordinate(lon=0, lat=0))

        assert snapshot.description == "no description"
        assert snapshot.temperature_celsius == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload,temperature", [
        ({"weather": {"description": "x"}, "main": {"temp": 20}}, 20),
        ({"weather": ["x"], "main": [20]}, 0),
        ({"weather": [{"description": 7}], "main": {"temp": "hot"}}, 0),
        ({"weather": None, "main": {"temp": True}}, 0),
    ])
    async def test_malformed_payload_uses_placeholders(
        self, http_client, settings, upstreams, payload, temperature
    ):
        """Unexpected shapes fall back to placeholders instead of raising."""
        upstreams.weather_payload = payload
        client = WeatherClient(http_client, settings)

        snapshot = await client.fetch_weather(Coordinate(lon=0, lat=0))

        assert snapshot.description == "no description"
        assert snapshot.temperature_celsius == temperature

    @pytest.mark.asyncio
    async def test_http_error(self, http_client, settings, upstreams):
        upstreams.weather_status = 401
        client = WeatherClient(http_client, settings)

        with pytest.raises(WeatherUnavailable):
            await client.fetch_weather(Coordinate(lon=0, lat=0))

    @pytest.mark.asyncio
    async def test_missing_key_skips_request(self, http_client, upstreams):
        client = WeatherClient(http_client, make_settings(openweather_api_key=""))

        with pytest.raises(WeatherUnavailable):
            await client.fetch_weather(Coordinate(lon=0, lat=0))

        assert upstreams.requests == []
