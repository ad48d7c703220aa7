"""
Routing - Driving routes between two coordinates.
"""
from urllib.parse import urlencode, quote
import logging
import math

from .http import ExternalService
from ..exceptions import RouteNotFound, UpstreamError
from ..models.trip import Coordinate, RouteSummary

logger = logging.getLogger(__name__)

DIRECTIONS_URL = "https://www.google.com/maps/dir/"


def to_waypoint(point: Coordinate) -> str:
    """Routing waypoint format: lat,lon (latitude first)."""
    return f"{point.lat},{point.lon}"


def format_waypoints(origin: Coordinate, destination: Coordinate) -> str:
    return f"{to_waypoint(origin)}|{to_waypoint(destination)}"


def build_directions_url(origin: str, destination: str) -> str:
    """Browser link to driving directions between two place names."""
    query = urlencode(
        {
            "api": "1",
            "origin": origin,
            "destination": destination,
            "travelmode": "driving",
        },
        quote_via=quote,
    )
    return f"{DIRECTIONS_URL}?{query}"


class RouteClient(ExternalService):
    """Computes driving routes with the Geoapify routing API."""

    service_name = "routing"
    required_credentials = {"geoapify_api_key": "GEOAPIFY_API_KEY"}

    async def compute_route(self, origin: Coordinate, destination: Coordinate) -> RouteSummary:
        """
        Compute a driving route with turn instructions.

        Distance and time are kept in meters and seconds; callers convert.

        Raises:
            RouteNotFound: no viable driving path, or the provider failed
        """
        params = {
            "waypoints": format_waypoints(origin, destination),
            "mode": "drive",
            "details": "instruction",
            "apiKey": self.settings.geoapify_api_key,
        }
        try:
            data = await self._get_json(self.settings.routing_url, params=params)
        except UpstreamError as e:
            logger.error(f"Routing error: {e}")
            raise RouteNotFound("The routing service could not compute a route.") from e

        features = data.get("features") if isinstance(data, dict) else None
        if not isinstance(features, list) or not features:
            raise RouteNotFound("No driving route exists between these places.")

        feature = features[0]
        try:
            distance = float(feature["properties"]["distance"])
            duration = float(feature["properties"]["time"])
        except (KeyError, TypeError, ValueError):
            distance = duration = 0.0
        if not (0 < distance < math.inf and 0 < duration < math.inf):
            raise RouteNotFound("The routing service returned a route without distance or time.")

        return RouteSummary(
            geometry=feature,
            distance_meters=distance,
            duration_seconds=duration
        )
