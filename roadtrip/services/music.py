"""
Music recommendations - Spotify client-credentials auth and track search.
"""
from typing import Optional
import logging

import httpx

from .http import ExternalService
from ..exceptions import AuthFailed, SearchFailed, UpstreamError
from ..models.trip import MusicCredential, MusicPage, Track

logger = logging.getLogger(__name__)


def build_music_query(origin: str, destination: str) -> str:
    """Search text for a trip. The template is fixed."""
    return f"{origin} to {destination} travel music"


class MusicTokenProvider(ExternalService):
    """Obtains service-level bearer tokens. Tokens are never refreshed."""

    service_name = "music_auth"
    required_credentials = {
        "spotify_client_id": "SPOTIFY_CLIENT_ID",
        "spotify_client_secret": "SPOTIFY_CLIENT_SECRET",
    }

    async def get_token(self) -> MusicCredential:
        """
        Exchange the client id/secret for a bearer token.

        Raises:
            AuthFailed: the call failed or the response has no access token
        """
        try:
            data = await self._post_json(
                self.settings.spotify_token_url,
                data={"grant_type": "client_credentials"},
                auth=httpx.BasicAuth(
                    self.settings.spotify_client_id,
                    self.settings.spotify_client_secret
                ),
            )
        except UpstreamError as e:
            raise AuthFailed(f"Could not obtain a music token: {e}") from e

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthFailed("Music auth response did not include an access token")
        return MusicCredential(token=token)


class MusicSearchClient(ExternalService):
    """Stateless track search; the caller owns the offset."""

    service_name = "music_search"

    async def search(
        self,
        query: str,
        offset: int,
        credential: MusicCredential,
        limit: Optional[int] = None
    ) -> MusicPage:
        """
        Fetch one page of tracks.

        Args:
            query: Search text, see ``build_music_query``
            offset: Index of the first result
            credential: Bearer token from ``MusicTokenProvider``
            limit: Page size, defaults to the configured page size (6)

        Raises:
            SearchFailed: transport error or token rejected
        """
        params = {
            "q": query,
            "type": "track",
            "limit": limit or self.settings.music_page_size,
            "offset": offset,
        }
        headers = {"Authorization": f"Bearer {credential.token}"}
        try:
            data = await self._get_json(
                self.settings.spotify_search_url,
                params=params,
                headers=headers
            )
        except UpstreamError as e:
            raise SearchFailed(f"Music search failed at offset {offset}: {e}") from e

        tracks = data.get("tracks") if isinstance(data, dict) else None
        if not isinstance(tracks, dict):
            raise SearchFailed(f"Music search at offset {offset} returned no tracks section")
        items = tracks.get("items") or []
        if not isinstance(items, list):
            raise SearchFailed(f"Music search at offset {offset} returned malformed items")
        return MusicPage(offset=offset, tracks=[t for t in map(parse_track, items) if t])


def _mapping(value) -> dict:
    return value if isinstance(value, dict) else {}


def parse_track(item: dict) -> Optional[Track]:
    """Map a search item to a Track; items without a name or link are dropped."""
    if not isinstance(item, dict):
        return None

    title = item.get("name")
    play_url = _mapping(item.get("external_urls")).get("spotify")
    if not isinstance(title, str) or not title or not isinstance(play_url, str) or not play_url:
        logger.warning(f"Skipping incomplete track item: {item.get('id')}")
        return None

    images = _mapping(item.get("album")).get("images")
    cover = None
    if isinstance(images, list) and images:
        cover = _mapping(images[0]).get("url")

    return Track(
        title=title,
        play_url=play_url,
        cover_image_url=cover if isinstance(cover, str) and cover else None
    )
