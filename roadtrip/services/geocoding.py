"""
Geocoding - Resolve free-text place names to coordinates.
"""
import logging

from pydantic import ValidationError

from .http import ExternalService
from ..exceptions import LocationNotFound, UpstreamError
from ..models.trip import Coordinate

logger = logging.getLogger(__name__)


class GeocodeResolver(ExternalService):
    """Resolves a place name with the Geoapify geocoding API."""

    service_name = "geocode"
    required_credentials = {"geoapify_api_key": "GEOAPIFY_API_KEY"}

    async def resolve(self, place_name: str) -> Coordinate:
        """
        Resolve a place name to a coordinate.

        The first candidate wins; there is no ranking or disambiguation.
        "City, Country" gives the best results but is not enforced.

        Raises:
            LocationNotFound: no candidate, a malformed candidate, or upstream failure
        """
        params = {
            "text": place_name,
            "apiKey": self.settings.geoapify_api_key,
        }
        try:
            data = await self._get_json(self.settings.geocode_url, params=params)
        except UpstreamError as e:
            logger.error(f"Geocoding error for '{place_name}': {e}")
            raise LocationNotFound(place_name, "geocoding service unavailable") from e

        features = data.get("features") if isinstance(data, dict) else None
        if not isinstance(features, list) or not features:
            logger.warning(f"No results found for place: {place_name}")
            raise LocationNotFound(place_name)

        try:
            lon, lat = features[0]["geometry"]["coordinates"][:2]
            coordinate = Coordinate(lon=lon, lat=lat)
        except (KeyError, TypeError, ValueError, ValidationError):
            logger.warning(f"Malformed geocoding candidate for place: {place_name}")
            raise LocationNotFound(place_name, "malformed geocoding result") from None

        logger.debug(f"Geocoded {place_name} to {coordinate.lat}, {coordinate.lon}")
        return coordinate
