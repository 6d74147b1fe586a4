"""MusicBrainz identity-graph provider.

Resolves a catalog artist URL (e.g. ``https://open.spotify.com/artist/...``)
to the MusicBrainz artist that links to it, using the URL search endpoint::

    GET /ws/2/url/?query=url:<encoded url>&targettype=artist&fmt=json

MusicBrainz asks clients for a descriptive User-Agent and at most one
request per second, so this adapter throttles itself with the same
``_throttle`` pattern used by the other single-endpoint providers.  The
setlist archive and catalog fetchers are not involved.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx

from setlist_scout.interfaces.identity_graph_provider import (
    IdentityCandidate,
    IIdentityGraphProvider,
)
from setlist_scout.utils.errors import (
    GATEWAY_STATUSES,
    ProviderUnavailableError,
    UpstreamHTTPError,
)
from setlist_scout.utils.logging import get_logger

_BASE_URL = "https://musicbrainz.org/ws/2"
_MIN_INTERVAL = 1.0  # seconds between requests


class MusicBrainzProvider(IIdentityGraphProvider):
    """URL-keyed artist lookup against MusicBrainz.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient`` for connection pooling and testability.
    user_agent:
        ``App/Version (contact)`` string required by MusicBrainz.
    min_interval:
        Minimum seconds between requests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        user_agent: str,
        base_url: str = _BASE_URL,
        min_interval: float = _MIN_INTERVAL,
    ) -> None:
        self._http = http_client
        self._user_agent = user_agent
        self._base_url = base_url.rstrip("/")
        self._min_interval = min_interval
        self._last_request_time: float = 0.0
        self._lock = asyncio.Lock()
        self._logger = get_logger(__name__)

    def get_provider_name(self) -> str:
        return "musicbrainz"

    async def lookup_by_url(self, url: str) -> IdentityCandidate | None:
        if not url:
            return None

        data = await self._get(
            "/url/",
            params={"query": f"url:{url}", "targettype": "artist", "fmt": "json"},
        )
        candidate = self._extract_candidate(data)
        self._logger.info(
            "identity_lookup",
            url=url,
            found=candidate is not None,
            identity_name=candidate.name if candidate else None,
        )
        return candidate

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _throttle(self) -> None:
        """Enforce minimum delay between requests."""
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request_time
            if self._last_request_time > 0 and elapsed < self._min_interval:
                await asyncio.sleep(self._min_interval - elapsed)
            self._last_request_time = time.monotonic()

    async def _get(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        await self._throttle()
        try:
            response = await self._http.get(
                f"{self._base_url}{path}",
                params=params,
                headers={"User-Agent": self._user_agent, "Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                message=f"MusicBrainz request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code in GATEWAY_STATUSES:
            raise ProviderUnavailableError(
                message=f"MusicBrainz gateway failure ({response.status_code})",
                provider_name=self.get_provider_name(),
            )
        if not response.is_success:
            raise UpstreamHTTPError(
                status_code=response.status_code,
                message=response.reason_phrase or f"HTTP {response.status_code}",
                provider_name=self.get_provider_name(),
            )
        return response.json()

    @staticmethod
    def _extract_candidate(data: dict[str, Any]) -> IdentityCandidate | None:
        """Read ``urls[0]["relation-list"][0].relations[0].artist``."""
        try:
            artist = data["urls"][0]["relation-list"][0]["relations"][0]["artist"]
        except (KeyError, IndexError, TypeError):
            return None
        if not artist.get("id") or not artist.get("name"):
            return None
        return IdentityCandidate(id=artist["id"], name=artist["name"])
