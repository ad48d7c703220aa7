"""
Static map rendering - Turns a route geometry into an embeddable image.
"""
from typing import Any, Optional, Sequence
import base64
import copy
import logging

from .http import ExternalService
from ..exceptions import RenderFailed, UpstreamError
from ..models.trip import Coordinate, MapImage

logger = logging.getLogger(__name__)

ROUTE_LINE_COLOR = "#2563eb"
ROUTE_LINE_WIDTH = "6"

MARKER_STYLE = {
    "color": "#ef4444",
    "size": "medium",
    "type": "awesome",
}


def waypoint_markers(geometry: dict[str, Any]) -> list[dict]:
    """One marker per waypoint listed in the route properties."""
    waypoints = (geometry.get("properties") or {}).get("waypoints") or []
    markers = []
    for waypoint in waypoints:
        location = waypoint.get("location") if isinstance(waypoint, dict) else None
        if not location or len(location) < 2:
            continue
        markers.append({"lat": location[1], "lon": location[0], **MARKER_STYLE})
    return markers


def build_render_request(
    geometry: dict[str, Any],
    marker_coordinates: Sequence[Coordinate] = (),
    *,
    style: str = "osm-bright",
    width: int = 900,
    height: int = 450,
    scale_factor: int = 2
) -> dict[str, Any]:
    """
    Build the static map request body for a route.

    The geometry is copied before the line styling is added, so the caller's
    route data is left untouched. Markers come from the route waypoints, or
    from ``marker_coordinates`` when the route lists none.
    """
    styled = copy.deepcopy(geometry)
    properties = styled.setdefault("properties", {})
    properties["linecolor"] = ROUTE_LINE_COLOR
    properties["linewidth"] = ROUTE_LINE_WIDTH

    markers = waypoint_markers(geometry)
    if not markers:
        markers = [
            {"lat": point.lat, "lon": point.lon, **MARKER_STYLE}
            for point in marker_coordinates
        ]

    return {
        "style": style,
        "width": width,
        "height": height,
        "scaleFactor": scale_factor,
        "geojson": styled,
        "markers": markers,
    }


class MapRenderer(ExternalService):
    """Renders route previews with the Geoapify static map API."""

    service_name = "static_map"
    required_credentials = {"geoapify_api_key": "GEOAPIFY_API_KEY"}

    async def render(
        self,
        geometry: dict[str, Any],
        marker_coordinates: Optional[Sequence[Coordinate]] = None
    ) -> MapImage:
        """
        Render a route geometry as a static map image.

        Raises:
            RenderFailed: transport error, or the response is not an image
        """
        body = build_render_request(
            geometry,
            marker_coordinates or (),
            style=self.settings.map_style,
            width=self.settings.map_width,
            height=self.settings.map_height,
            scale_factor=self.settings.map_scale_factor,
        )
        try:
            response = await self._send(
                "POST",
                self.settings.static_map_url,
                params={"apiKey": self.settings.geoapify_api_key},
                json=body,
            )
        except UpstreamError as e:
            logger.error(f"Error fetching map preview: {e}")
            raise RenderFailed(str(e)) from e

        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not content_type.startswith("image/"):
            raise RenderFailed(f"unexpected map content type '{content_type or 'none'}'")
        if not response.content:
            raise RenderFailed("empty map image")

        return MapImage(
            content_type=content_type,
            data=base64.b64encode(response.content).decode("ascii")
        )
