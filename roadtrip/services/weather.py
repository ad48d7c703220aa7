"""
Weather - Current conditions from OpenWeatherMap.
"""
import logging
import math

from .http import ExternalService
from ..exceptions import UpstreamError, WeatherUnavailable
from ..models.trip import Coordinate, WeatherSnapshot

logger = logging.getLogger(__name__)


class WeatherClient(ExternalService):
    """Fetches current weather. Missing fields fall back to placeholders."""

    service_name = "weather"

    async def fetch_weather(self, point: Coordinate) -> WeatherSnapshot:
        if not self.settings.openweather_api_key:
            raise WeatherUnavailable("OPENWEATHER_API_KEY is not configured")

        params = {
            "lat": point.lat,
            "lon": point.lon,
            "units": "metric",
            "lang": self.settings.weather_lang,
            "appid": self.settings.openweather_api_key,
        }
        try:
            data = await self._get_json(self.settings.weather_url, params=params)
        except UpstreamError as e:
            logger.error(f"Weather API Error: {e}")
            raise WeatherUnavailable(str(e)) from e

        if not isinstance(data, dict):
            data = {}

        snapshot = WeatherSnapshot()
        conditions = data.get("weather")
        if isinstance(conditions, list) and conditions and isinstance(conditions[0], dict):
            description = conditions[0].get("description")
            if isinstance(description, str) and description:
                snapshot.description = description

        main = data.get("main")
        temperature = main.get("temp") if isinstance(main, dict) else None
        if (
            isinstance(temperature, (int, float))
            and not isinstance(temperature, bool)
            and math.isfinite(temperature)
        ):
            snapshot.temperature_celsius = float(temperature)

        return snapshot
