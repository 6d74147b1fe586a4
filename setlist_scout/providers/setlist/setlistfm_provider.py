"""setlist.fm archive provider.

Queries the setlist.fm REST API (``/search/setlists`` and ``/setlist/{id}``)
and maps its nested JSON into :mod:`setlist_scout.models.setlist` models.

Every request goes through the injected archive
:class:`~setlist_scout.utils.rate_limiter.RateLimitedFetcher`, which owns
throttling (one request in flight, 600 ms spacing) and 429 retries.  This
class only builds requests and maps responses.

Response shape (abridged)::

    {"total": 42, "itemsPerPage": 20, "page": 1,
     "setlist": [{"id": "...", "eventDate": "21-06-2024",
                  "artist": {"name": "..."}, "tour": {"name": "..."},
                  "venue": {"name": "..."},
                  "sets": {"set": [{"name": "...", "encore": 1,
                                    "song": [{"name": "...",
                                              "cover": {"name": "..."},
                                              "tape": true}]}]}}]}
"""

from __future__ import annotations

from typing import Any

import httpx

from setlist_scout.interfaces.setlist_archive_provider import ISetlistArchiveProvider
from setlist_scout.models.setlist import (
    Performance,
    SetlistPage,
    SetlistTourInfo,
    SetSection,
    SongEntry,
)
from setlist_scout.utils.errors import UpstreamHTTPError
from setlist_scout.utils.logging import get_logger
from setlist_scout.utils.rate_limiter import RateLimitedFetcher

_BASE_URL = "https://api.setlist.fm/rest/1.0"


class SetlistFmProvider(ISetlistArchiveProvider):
    """setlist.fm adapter.

    Parameters
    ----------
    fetcher:
        The archive's shared rate-limited fetcher.
    api_key:
        setlist.fm API key, sent as ``x-api-key``.
    base_url:
        API root; overridable for tests.
    """

    def __init__(
        self,
        fetcher: RateLimitedFetcher,
        api_key: str,
        base_url: str = _BASE_URL,
    ) -> None:
        self._fetcher = fetcher
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._logger = get_logger(__name__)

    def get_provider_name(self) -> str:
        return "setlistfm"

    # ------------------------------------------------------------------
    # ISetlistArchiveProvider implementation
    # ------------------------------------------------------------------

    async def search_by_artist_name(
        self,
        artist_name: str,
        page: int = 1,
        tour_name: str | None = None,
    ) -> SetlistPage:
        # Quoting the name makes setlist.fm match the whole phrase.
        params: dict[str, Any] = {"artistName": f'"{artist_name}"', "p": page}
        if tour_name:
            params["tourName"] = tour_name
        return await self._search(params, label=artist_name)

    async def search_by_identity_id(
        self,
        identity_id: str,
        page: int = 1,
        tour_name: str | None = None,
    ) -> SetlistPage:
        params: dict[str, Any] = {"artistMbid": identity_id, "p": page}
        if tour_name:
            params["tourName"] = tour_name
        return await self._search(params, label=identity_id)

    async def get_setlist(self, setlist_id: str) -> SetlistTourInfo:
        request = self._build_request(f"/setlist/{setlist_id}")
        response = await self._fetcher.fetch(request)
        data = response.json()
        info = SetlistTourInfo(
            band_name=(data.get("artist") or {}).get("name", ""),
            tour_name=(data.get("tour") or {}).get("name"),
        )
        self._logger.info(
            "setlist_tour_info",
            setlist_id=setlist_id,
            band_name=info.band_name,
            tour_name=info.tour_name,
        )
        return info

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_request(self, path: str, params: dict[str, Any] | None = None) -> httpx.Request:
        return httpx.Request(
            "GET",
            f"{self._base_url}{path}",
            params=params,
            headers={
                "Accept": "application/json",
                "x-api-key": self._api_key,
            },
        )

    async def _search(self, params: dict[str, Any], label: str) -> SetlistPage:
        request = self._build_request("/search/setlists", params)
        try:
            response = await self._fetcher.fetch(request)
        except UpstreamHTTPError as exc:
            # setlist.fm answers 404 when a search matches nothing.
            if exc.status_code == 404:
                self._logger.info("archive_search_empty", query=label, page=params.get("p"))
                return SetlistPage(total=0, page=params.get("p", 1), performances=[])
            raise

        page = self._map_page(response.json())
        self._logger.info(
            "archive_page_fetched",
            query=label,
            page=page.page,
            total=page.total,
            performances=len(page.performances),
        )
        return page

    @staticmethod
    def _map_page(data: dict[str, Any]) -> SetlistPage:
        performances = [
            SetlistFmProvider._map_performance(raw)
            for raw in data.get("setlist") or []
            if (raw.get("artist") or {}).get("name")
        ]
        return SetlistPage(
            total=int(data.get("total") or 0),
            items_per_page=int(data.get("itemsPerPage") or 20),
            page=int(data.get("page") or 1),
            performances=performances,
        )

    @staticmethod
    def _map_performance(raw: dict[str, Any]) -> Performance:
        sections: list[SetSection] = []
        for raw_set in (raw.get("sets") or {}).get("set") or []:
            songs = [
                SongEntry(
                    name=song.get("name", ""),
                    is_cover="cover" in song,
                    cover_artist=(song.get("cover") or {}).get("name"),
                    is_tape=song.get("tape") is True,
                )
                for song in raw_set.get("song") or []
            ]
            sections.append(
                SetSection(name=raw_set.get("name"), encore=raw_set.get("encore"), songs=songs)
            )

        return Performance(
            setlist_id=raw.get("id"),
            artist_name=raw["artist"]["name"],
            tour_name=(raw.get("tour") or {}).get("name"),
            event_date=raw.get("eventDate"),
            venue_name=(raw.get("venue") or {}).get("name"),
            sets=sections,
        )
