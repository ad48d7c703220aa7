"""
Trip models - Route, map, weather and music results bundled into a plan.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional
from datetime import datetime
import math


class Coordinate(BaseModel):
    """A point stored longitude first, as GeoJSON does."""
    model_config = ConfigDict(frozen=True)

    lon: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)


class RouteSummary(BaseModel):
    """Driving route between two coordinates, in SI units."""
    model_config = ConfigDict(frozen=True)

    geometry: dict[str, Any] = Field(
        ...,
        description="Route GeoJSON feature as returned by the routing service"
    )
    distance_meters: float = Field(..., gt=0)
    duration_seconds: float = Field(..., gt=0)


class MapImage(BaseModel):
    """Rendered static map, base64 encoded."""
    content_type: str = Field(..., description="Image MIME type, e.g. 'image/png'")
    data: str = Field(..., min_length=1, description="Base64 image payload")

    @property
    def data_url(self) -> str:
        return f"data:{self.content_type};base64,{self.data}"


class WeatherSnapshot(BaseModel):
    """Current conditions at the destination."""
    description: str = "no description"
    temperature_celsius: float = Field(default=0.0, allow_inf_nan=False)


class Track(BaseModel):
    """A recommended music track."""
    title: str
    play_url: str
    cover_image_url: Optional[str] = None


class MusicPage(BaseModel):
    """One page of search results and the offset it was fetched at."""
    offset: int = Field(..., ge=0)
    tracks: list[Track] = Field(default_factory=list)


class MusicCredential(BaseModel):
    """Bearer token for the music catalog. Expiry is not tracked."""
    token: str = Field(..., min_length=1)


class TripPlan(BaseModel):
    """Complete road trip plan."""
    origin: str
    destination: str
    origin_coordinate: Coordinate
    destination_coordinate: Coordinate
    route: RouteSummary
    map_image: Optional[MapImage] = None
    weather: Optional[WeatherSnapshot] = None
    tracks: list[Track] = Field(default_factory=list)
    next_music_offset: int = Field(default=0, ge=0)
    directions_url: str = ""
    degraded: list[str] = Field(
        default_factory=list,
        description="Sections that failed softly and were left empty"
    )
    created_at: datetime = Field(default_factory=datetime.now)

    def append_page(self, page: MusicPage, page_size: int):
        """Append a fetched page and move the offset past it."""
        self.tracks.extend(page.tracks)
        self.next_music_offset = page.offset + page_size

    def to_display_dict(self) -> dict:
        """Convert to display-friendly dictionary."""
        minutes = self.route.duration_seconds / 60
        return {
            "origin": self.origin,
            "destination": self.destination,
            "distance_km": self.route.distance_meters / 1000,
            "duration_minutes": minutes,
            "duration_text": format_duration(minutes),
            "map_image": self.map_image.data_url if self.map_image else None,
            "directions_url": self.directions_url,
            "weather": {
                "description": self.weather.description,
                "temperature": f"{round_half_up(self.weather.temperature_celsius)}°C",
            } if self.weather else None,
            "tracks": [
                {
                    "title": track.title,
                    "url": track.play_url,
                    "image": track.cover_image_url,
                }
                for track in self.tracks
            ],
            "next_music_offset": self.next_music_offset,
            "degraded": self.degraded,
            "created_at": self.created_at.isoformat(),
        }


def format_duration(minutes: float) -> str:
    """Format a duration as '45 min', '3h' or '2h 30min'."""
    hours = int(minutes // 60)
    mins = int(minutes % 60)

    if hours == 0:
        return f"{mins} min"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}min"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (20.5 -> 21, -0.5 -> 0)."""
    return math.floor(value + 0.5)
