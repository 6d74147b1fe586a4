"""Spotify catalog provider.

Implements client-credentials token exchange, artist search, and
per-song track search.  All calls go through the catalog's
:class:`~setlist_scout.utils.rate_limiter.RateLimitedFetcher`
(5 concurrent, 200 ms spacing, 429 retry).

# ─── HOW TRACK SELECTION WORKS (Junior Developer Guide) ────────────────
#
# By default the first search result is the match: Spotify's relevance
# ranking is taken as authoritative.
#
# With ``smart_track_selection`` switched on, a query like
# ``track:Anthem artist:Aurora Test Band`` that returns the same song on
# the studio album, a live album and a greatest-hits record is re-ranked.
# We score only the first 7 results using the rule tables below and keep
# the highest score; ties go to the better-ranked result.
#
#   rank bonus      (7 - rank) * 10
#   album_type      album +100, single +50, compilation -30
#   live album      -50 unless the song title itself is a "live" song
#   hits/best-of    -40
#   exact title     +30
#
# Either way, if a search returns nothing and the title contains a known
# stylistic variant (``ultraviolet``), we retry once with the alternate
# spelling.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import re
from typing import Any

import httpx

from setlist_scout.interfaces.catalog_provider import ICatalogProvider
from setlist_scout.models.catalog import CatalogArtist, CatalogImage, CatalogTrack
from setlist_scout.utils.errors import ConfigurationError
from setlist_scout.utils.logging import get_logger
from setlist_scout.utils.rate_limiter import RateLimitedFetcher

_API_URL = "https://api.spotify.com/v1"
_TOKEN_URL = "https://accounts.spotify.com/api/token"
_ARTIST_SEARCH_LIMIT = 10

# --- Track scoring rule tables ---
_RANK_WINDOW = 7
_RANK_WEIGHT = 10
_ALBUM_TYPE_SCORES: dict[str, int] = {"album": 100, "single": 50, "compilation": -30}
_LIVE_ALBUM_MARKERS = (
    "live", "concert", "tour", "unplugged", "acoustic session",
    "live at", "live from", "in concert", "live recordings",
)
_LIVE_SONG_TITLES = (
    "live forever", "live and let die", "live to tell", "live wire",
    "live it up", "live your life", "live like you were dying",
)
_LIVE_ALBUM_PENALTY = -50
_COMPILATION_MARKERS = (
    "greatest hits", "best of", "collection", "anthology", "essentials",
    "complete", "ultimate", "definitive", "selected", "hits",
)
_COMPILATION_PENALTY = -40
_EXACT_NAME_BONUS = 30

# (written form, alternate form) pairs tried when a search comes back empty.
_SPELLING_VARIANTS: tuple[tuple[str, str], ...] = (("ultraviolet", "ultra violet"),)

_SMALL_IMAGE_HEIGHT = 64
_MEDIUM_IMAGE_HEIGHT = 300


def score_track(track: dict[str, Any], original_name: str, rank: int) -> int:
    """Score one raw Spotify track for how well it represents *original_name*."""
    album = track.get("album") or {}
    album_name = (album.get("name") or "").lower()
    track_name = (track.get("name") or "").lower()
    original_lower = original_name.lower()

    score = (_RANK_WINDOW - rank) * _RANK_WEIGHT
    score += _ALBUM_TYPE_SCORES.get(album.get("album_type") or "", 0)

    is_live_album = any(marker in album_name for marker in _LIVE_ALBUM_MARKERS)
    is_live_song = any(title in original_lower for title in _LIVE_SONG_TITLES)
    if is_live_album and not is_live_song:
        score += _LIVE_ALBUM_PENALTY

    if any(marker in album_name for marker in _COMPILATION_MARKERS):
        score += _COMPILATION_PENALTY

    if track_name == original_lower:
        score += _EXACT_NAME_BONUS
    return score


def select_best_track(tracks: list[dict[str, Any]], original_name: str) -> dict[str, Any] | None:
    """Pick the highest-scoring track among the top results."""
    candidates = tracks[:_RANK_WINDOW]
    if not candidates:
        return None
    scored = [(score_track(t, original_name, rank), rank) for rank, t in enumerate(candidates)]
    # max() keeps the first of equal scores, i.e. the better-ranked result.
    _, best_rank = max(scored, key=lambda pair: pair[0])
    return candidates[best_rank]


def spelling_variant(track_name: str) -> str | None:
    """Return the alternate spelling for *track_name*, if a rule applies."""
    lowered = track_name.lower()
    for written, alternate in _SPELLING_VARIANTS:
        if written in lowered and alternate not in lowered:
            return re.sub(re.escape(written), alternate, track_name, count=1, flags=re.IGNORECASE)
    return None


class SpotifyProvider(ICatalogProvider):
    """Spotify Web API adapter.

    Parameters
    ----------
    fetcher:
        The catalog's shared rate-limited fetcher.
    client_id, client_secret:
        Client-credentials pair.
    smart_track_selection:
        Re-rank the top results with the scoring tables instead of taking
        the first result.
    """

    def __init__(
        self,
        fetcher: RateLimitedFetcher,
        client_id: str,
        client_secret: str,
        api_url: str = _API_URL,
        token_url: str = _TOKEN_URL,
        smart_track_selection: bool = False,
    ) -> None:
        self._fetcher = fetcher
        self._client_id = client_id
        self._client_secret = client_secret
        self._api_url = api_url.rstrip("/")
        self._token_url = token_url
        self._smart_track_selection = smart_track_selection
        self._logger = get_logger(__name__)

    def get_provider_name(self) -> str:
        return "spotify"

    # ------------------------------------------------------------------
    # ICatalogProvider implementation
    # ------------------------------------------------------------------

    async def get_access_token(self) -> str:
        if not self._client_id or not self._client_secret:
            raise ConfigurationError(
                message="Spotify client credentials are not configured",
                provider_name=self.get_provider_name(),
            )
        request = httpx.Request(
            "POST",
            self._token_url,
            data={
                "grant_type": "client_credentials",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
            },
        )
        response = await self._fetcher.fetch(request)
        self._logger.info("catalog_token_received")
        return response.json()["access_token"]

    async def search_artists(self, query: str, token: str | None = None) -> list[CatalogArtist]:
        token = token or await self.get_access_token()
        data = await self._search(
            token, {"q": query, "type": "artist", "limit": _ARTIST_SEARCH_LIMIT}
        )
        artists = [
            self._map_artist(item) for item in (data.get("artists") or {}).get("items") or []
        ]
        self._logger.info("catalog_artist_search", query=query, results=len(artists))
        return artists

    async def search_track(self, token: str, track_name: str, artist_name: str) -> CatalogTrack | None:
        items = await self._search_tracks(token, track_name, artist_name)

        if not items:
            variant = spelling_variant(track_name)
            if variant is not None:
                self._logger.info(
                    "catalog_track_variant_retry",
                    original=track_name,
                    variant=variant,
                )
                items = await self._search_tracks(token, variant, artist_name)

        if self._smart_track_selection:
            best = select_best_track(items, track_name)
        else:
            best = items[0] if items else None
        if best is None:
            self._logger.debug("catalog_track_not_found", track=track_name, artist=artist_name)
            return None
        return self._map_track(best)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _search(self, token: str, params: dict[str, Any]) -> dict[str, Any]:
        request = httpx.Request(
            "GET",
            f"{self._api_url}/search",
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        )
        response = await self._fetcher.fetch(request)
        return response.json()

    async def _search_tracks(self, token: str, track_name: str, artist_name: str) -> list[dict[str, Any]]:
        data = await self._search(
            token, {"q": f"track:{track_name} artist:{artist_name}", "type": "track"}
        )
        return (data.get("tracks") or {}).get("items") or []

    @staticmethod
    def _map_artist(item: dict[str, Any]) -> CatalogArtist:
        images = item.get("images") or []
        # Third image is the small thumbnail when Spotify provides three sizes.
        raw_image = images[2] if len(images) > 2 else (images[0] if images else None)
        return CatalogArtist(
            name=item.get("name", ""),
            id=item.get("id", ""),
            url=(item.get("external_urls") or {}).get("spotify", ""),
            image=CatalogImage(**raw_image) if raw_image else None,
        )

    @staticmethod
    def _map_track(track: dict[str, Any]) -> CatalogTrack:
        album = track.get("album") or {}
        images = album.get("images") or []
        artists = track.get("artists") or []

        def _image(height: int) -> str | None:
            return next((img.get("url") for img in images if img.get("height") == height), None)

        return CatalogTrack(
            name=track.get("name", ""),
            artist_name=artists[0].get("name") if artists else None,
            album_name=album.get("name"),
            album_type=album.get("album_type"),
            release_date=album.get("release_date"),
            uri=track.get("uri"),
            image_small=_image(_SMALL_IMAGE_HEIGHT),
            image_medium=_image(_MEDIUM_IMAGE_HEIGHT),
        )
