"""
Shared HTTP plumbing for upstream services.
Every external call goes through ``ExternalService._send`` so transport and status
errors surface as ``UpstreamError`` and never leak the API keys in query strings.
"""
from contextlib import asynccontextmanager
from typing import Any, Optional
import logging

import httpx

from ..config import Settings, settings as default_settings
from ..exceptions import MissingCredential, UpstreamError

logger = logging.getLogger(__name__)


class ExternalService:
    """Base class for clients of one upstream API."""

    service_name = "http"
    # Settings attribute -> env var name, checked at construction
    required_credentials: dict[str, str] = {}

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None
    ):
        self.settings = settings or default_settings
        self._client = client
        missing = [
            env_name
            for attr, env_name in self.required_credentials.items()
            if not getattr(self.settings, attr)
        ]
        if missing:
            raise MissingCredential(missing)

    @asynccontextmanager
    async def _session(self):
        """Yield the injected client, or a short-lived one per call."""
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(timeout=self.settings.http_timeout) as client:
                yield client

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Issue one request and return the successful response."""
        async with self._session() as client:
            try:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                # Message names the status only; the URL may carry a key
                raise UpstreamError(
                    self.service_name,
                    f"HTTP {e.response.status_code}"
                ) from None
            except httpx.TimeoutException:
                raise UpstreamError(
                    self.service_name,
                    f"request timed out after {self.settings.http_timeout}s"
                ) from None
            except httpx.HTTPError as e:
                raise UpstreamError(
                    self.service_name,
                    f"request failed: {type(e).__name__}"
                ) from None

    async def _get_json(self, url: str, **kwargs: Any) -> Any:
        response = await self._send("GET", url, **kwargs)
        return self._decode_json(response)

    async def _post_json(self, url: str, **kwargs: Any) -> Any:
        response = await self._send("POST", url, **kwargs)
        return self._decode_json(response)

    def _decode_json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            raise UpstreamError(self.service_name, "response is not valid JSON") from None
