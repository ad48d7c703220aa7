"""Data models for the road trip planner."""
from .trip import (
    Coordinate,
    RouteSummary,
    MapImage,
    WeatherSnapshot,
    Track,
    MusicPage,
    MusicCredential,
    TripPlan,
)
from .session import PlannerSession, PlannerState, SessionStore

__all__ = [
    "Coordinate",
    "RouteSummary",
    "MapImage",
    "WeatherSnapshot",
    "Track",
    "MusicPage",
    "MusicCredential",
    "TripPlan",
    "PlannerSession",
    "PlannerState",
    "SessionStore",
]
