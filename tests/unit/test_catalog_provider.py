"""Unit tests for the Spotify catalog provider and its track-selection rules."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from setlist_scout.providers.catalog.spotify_provider import (
    SpotifyProvider,
    score_track,
    select_best_track,
    spelling_variant,
)
from setlist_scout.utils.errors import ConfigurationError
from setlist_scout.utils.rate_limiter import RateLimitedFetcher, RateLimiterConfig

_API = "https://catalog.test/v1"
_TOKEN = "https://catalog.test/api/token"


def _raw_track(
    name: str,
    album: str = "First Light",
    album_type: str = "album",
    uri: str | None = None,
) -> dict[str, Any]:
    return {
        "name": name,
        "uri": uri or f"spotify:track:{name.lower().replace(' ', '')}",
        "artists": [{"name": "Aurora Test Band"}],
        "album": {
            "name": album,
            "album_type": album_type,
            "release_date": "2023-04-01",
            "images": [
                {"url": "https://img.test/640.jpg", "height": 640, "width": 640},
                {"url": "https://img.test/300.jpg", "height": 300, "width": 300},
                {"url": "https://img.test/64.jpg", "height": 64, "width": 64},
            ],
        },
    }


def _provider(
    handler,
    client_id: str = "cid",
    client_secret: str = "secret",
    smart_track_selection: bool = False,
) -> SpotifyProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = RateLimitedFetcher(
        client, RateLimiterConfig(max_concurrent=5, min_interval=0.0), "spotify"
    )
    return SpotifyProvider(
        fetcher=fetcher,
        client_id=client_id,
        client_secret=client_secret,
        api_url=_API,
        token_url=_TOKEN,
        smart_track_selection=smart_track_selection,
    )


class TestTrackSelection:
    def test_studio_album_beats_live_album(self) -> None:
        tracks = [
            _raw_track("Anthem", album="Anthem (Live at Wembley)"),
            _raw_track("Anthem", album="First Light"),
        ]
        assert select_best_track(tracks, "Anthem")["album"]["name"] == "First Light"

    def test_live_song_title_is_not_penalized(self) -> None:
        live = _raw_track("Live Forever", album="Live Forever Tour")
        assert score_track(live, "Live Forever", 0) == score_track(
            _raw_track("Live Forever", album="Definitely Maybe"), "Live Forever", 0
        )

    def test_compilation_penalized(self) -> None:
        tracks = [
            _raw_track("Anthem", album="Greatest Hits", album_type="compilation"),
            _raw_track("Anthem", album="Anthem", album_type="single"),
        ]
        assert select_best_track(tracks, "Anthem")["album"]["album_type"] == "single"

    def test_ties_keep_better_ranked_result(self) -> None:
        tracks = [_raw_track("Anthem", uri="spotify:track:first")] * 2
        assert select_best_track(tracks, "Anthem")["uri"] == "spotify:track:first"

    def test_only_top_seven_considered(self) -> None:
        tracks = [_raw_track("Other", album_type="compilation", album="Hits")] * 7
        tracks.append(_raw_track("Anthem", uri="spotify:track:eighth"))
        assert select_best_track(tracks, "Anthem")["uri"] != "spotify:track:eighth"

    def test_empty_results(self) -> None:
        assert select_best_track([], "Anthem") is None

    def test_spelling_variant(self) -> None:
        assert spelling_variant("Ultraviolet") == "ultra violet"
        assert spelling_variant("ultraviolet light") == "ultra violet light"
        assert spelling_variant("Ultra Violet") is None
        assert spelling_variant("Anthem") is None


class TestSpotifyProvider:
    def test_provider_name(self) -> None:
        assert _provider(lambda r: httpx.Response(200)).get_provider_name() == "spotify"

    @pytest.mark.asyncio
    async def test_access_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})

        token = await _provider(handler).get_access_token()

        assert token == "tok"
        assert seen[0].method == "POST"
        assert str(seen[0].url) == _TOKEN
        body = seen[0].content.decode()
        assert "grant_type=client_credentials" in body
        assert "client_id=cid" in body

    @pytest.mark.asyncio
    async def test_missing_credentials(self) -> None:
        provider = _provider(lambda r: httpx.Response(200), client_id="", client_secret="")
        with pytest.raises(ConfigurationError):
            await provider.get_access_token()

    @pytest.mark.asyncio
    async def test_search_track_maps_fields(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"tracks": {"items": [_raw_track("Anthem")]}})

        track = await _provider(handler).search_track("tok", "Anthem", "Aurora Test Band")

        assert seen[0].url.params["q"] == "track:Anthem artist:Aurora Test Band"
        assert seen[0].url.params["type"] == "track"
        assert seen[0].headers["authorization"] == "Bearer tok"
        assert track is not None
        assert track.name == "Anthem"
        assert track.artist_name == "Aurora Test Band"
        assert track.album_name == "First Light"
        assert track.release_date == "2023-04-01"
        assert track.image_small == "https://img.test/64.jpg"
        assert track.image_medium == "https://img.test/300.jpg"
        assert track.uri == "spotify:track:anthem"

    @pytest.mark.asyncio
    async def test_search_track_takes_first_result_by_default(self) -> None:
        live_first = _raw_track("Anthem", album="Anthem (Live at Wembley)", uri="spotify:track:live")
        studio_second = _raw_track("Anthem", album="First Light", uri="spotify:track:studio")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"tracks": {"items": [live_first, studio_second]}})

        track = await _provider(handler).search_track("tok", "Anthem", "Aurora Test Band")

        assert track is not None
        assert track.uri == "spotify:track:live"
        assert track.album_name == "Anthem (Live at Wembley)"

    @pytest.mark.asyncio
    async def test_search_track_smart_selection_reranks(self) -> None:
        live_first = _raw_track("Anthem", album="Anthem (Live at Wembley)", uri="spotify:track:live")
        studio_second = _raw_track("Anthem", album="First Light", uri="spotify:track:studio")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"tracks": {"items": [live_first, studio_second]}})

        provider = _provider(handler, smart_track_selection=True)
        track = await provider.search_track("tok", "Anthem", "Aurora Test Band")

        assert track is not None
        assert track.uri == "spotify:track:studio"

    @pytest.mark.asyncio
    async def test_search_track_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"tracks": {"items": []}})

        assert await _provider(handler).search_track("tok", "Anthem", "Aurora Test Band") is None

    @pytest.mark.asyncio
    async def test_variant_retry_on_empty_result(self) -> None:
        queries: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            query = request.url.params["q"]
            queries.append(query)
            if "ultra violet" in query:
                return httpx.Response(200, json={"tracks": {"items": [_raw_track("Ultra Violet")]}})
            return httpx.Response(200, json={"tracks": {"items": []}})

        track = await _provider(handler).search_track("tok", "Ultraviolet", "Aurora Test Band")

        assert queries == [
            "track:Ultraviolet artist:Aurora Test Band",
            "track:ultra violet artist:Aurora Test Band",
        ]
        assert track is not None and track.name == "Ultra Violet"

    @pytest.mark.asyncio
    async def test_search_artists(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.method == "POST":
                return httpx.Response(200, json={"access_token": "tok"})
            return httpx.Response(
                200,
                json={
                    "artists": {
                        "items": [
                            {
                                "name": "Aurora Test Band",
                                "id": "sp-aurora",
                                "external_urls": {"spotify": "https://open.spotify.com/artist/sp-aurora"},
                                "images": [
                                    {"url": "https://img.test/640.jpg", "height": 640, "width": 640},
                                    {"url": "https://img.test/320.jpg", "height": 320, "width": 320},
                                    {"url": "https://img.test/160.jpg", "height": 160, "width": 160},
                                ],
                            },
                            {"name": "Aurora Tribute", "id": "sp-tribute", "images": []},
                        ]
                    }
                },
            )

        artists = await _provider(handler).search_artists("Aurora")

        assert seen[1].url.params["limit"] == "10"
        assert seen[1].url.params["type"] == "artist"
        assert [a.name for a in artists] == ["Aurora Test Band", "Aurora Tribute"]
        assert artists[0].image is not None
        assert artists[0].image.url == "https://img.test/160.jpg"
        assert artists[0].url == "https://open.spotify.com/artist/sp-aurora"
        assert artists[1].image is None
