"""
Configuration management for the road trip planner.
Secrets, upstream endpoints and map canvas parameters come from the environment.
"""
from pydantic_settings import BaseSettings

from .exceptions import MissingCredential


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Upstream credentials
    geoapify_api_key: str = ""
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    openweather_api_key: str = ""  # Optional: weather degrades without it

    # Upstream endpoints
    geocode_url: str = "https://api.geoapify.com/v1/geocode/search"
    routing_url: str = "https://api.geoapify.com/v1/routing"
    static_map_url: str = "https://maps.geoapify.com/v1/staticmap"
    weather_url: str = "https://api.openweathermap.org/data/2.5/weather"
    spotify_token_url: str = "https://accounts.spotify.com/api/token"
    spotify_search_url: str = "https://api.spotify.com/v1/search"

    # Static map canvas
    map_style: str = "osm-bright"
    map_width: int = 900
    map_height: int = 450
    map_scale_factor: int = 2

    # Upstream parameters
    weather_lang: str = "en"
    music_page_size: int = 6
    http_timeout: float = 10.0

    # Server Configuration
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = True
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def missing_credentials(self) -> list[str]:
        """Names of the required secrets that are not configured."""
        required = {
            "GEOAPIFY_API_KEY": self.geoapify_api_key,
            "SPOTIFY_CLIENT_ID": self.spotify_client_id,
            "SPOTIFY_CLIENT_SECRET": self.spotify_client_secret,
        }
        return [name for name, value in required.items() if not value]

    def require_credentials(self):
        """Fail fast when any required secret is absent."""
        missing = self.missing_credentials()
        if missing:
            raise MissingCredential(missing)


# Global settings instance
settings = Settings()
