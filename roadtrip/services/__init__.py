"""Services for the road trip planner."""
from .geocoding import GeocodeResolver
from .routing import RouteClient
from .static_map import MapRenderer
from .weather import WeatherClient
from .music import MusicTokenProvider, MusicSearchClient
from .trip_planner import TripPlanner

__all__ = [
    "GeocodeResolver",
    "RouteClient",
    "MapRenderer",
    "WeatherClient",
    "MusicTokenProvider",
    "MusicSearchClient",
    "TripPlanner",
]
