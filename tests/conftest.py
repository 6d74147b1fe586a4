"""Shared pytest fixtures for the SetlistScout test suite."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from setlist_scout.models.artist import ArtistRef
from setlist_scout.models.setlist import Performance, SetlistPage, SetSection, SongEntry

# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_song(
    name: str,
    cover_artist: str | None = None,
    is_tape: bool = False,
) -> SongEntry:
    return SongEntry(
        name=name,
        is_cover=cover_artist is not None,
        cover_artist=cover_artist,
        is_tape=is_tape,
    )


def make_performance(
    artist_name: str = "Aurora Test Band",
    tour_name: str | None = "Test Tour 2024",
    event_date: str = "01-06-2024",
    songs: list[SongEntry | str] | None = None,
    setlist_id: str | None = None,
) -> Performance:
    """Build a performance with one set section, or none when *songs* is empty."""
    entries = [make_song(s) if isinstance(s, str) else s for s in (songs or [])]
    sets = [SetSection(name="Main", songs=entries)] if entries else []
    return Performance(
        setlist_id=setlist_id,
        artist_name=artist_name,
        tour_name=tour_name,
        event_date=event_date,
        sets=sets,
    )


def make_page(
    performances: list[Performance],
    page: int = 1,
    total: int | None = None,
    items_per_page: int = 20,
) -> SetlistPage:
    return SetlistPage(
        total=len(performances) if total is None else total,
        items_per_page=items_per_page,
        page=page,
        performances=performances,
    )


def raw_setlist(
    artist_name: str = "Aurora Test Band",
    tour_name: str | None = "Test Tour 2024",
    event_date: str = "01-06-2024",
    songs: list[dict[str, Any]] | None = None,
    setlist_id: str = "63de4613",
) -> dict[str, Any]:
    """A setlist object shaped like the setlist.fm JSON API."""
    raw: dict[str, Any] = {
        "id": setlist_id,
        "eventDate": event_date,
        "artist": {"mbid": "mbid-aurora", "name": artist_name},
        "venue": {"name": "Test Hall"},
        "sets": {"set": [{"name": "", "song": songs}] if songs else []},
    }
    if tour_name is not None:
        raw["tour"] = {"name": tour_name}
    return raw


def json_response(status_code: int, payload: Any = None, **kwargs: Any) -> httpx.Response:
    return httpx.Response(status_code, json=payload if payload is not None else {}, **kwargs)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def artist() -> ArtistRef:
    return ArtistRef(
        name="Aurora Test Band",
        catalog_id="sp-aurora",
        catalog_url="https://open.spotify.com/artist/sp-aurora",
    )


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Return a minimal configuration mirroring config/config.yaml."""
    return {
        "http": {"timeout": 5.0},
        "archive": {
            "base_url": "https://archive.test/rest/1.0",
            "rate_limit": {"max_concurrent": 1, "min_interval": 0.0},
        },
        "catalog": {
            "api_url": "https://catalog.test/v1",
            "token_url": "https://catalog.test/api/token",
            "rate_limit": {"max_concurrent": 5, "min_interval": 0.0},
        },
        "identity": {
            "base_url": "https://identity.test/ws/2",
            "min_interval": 0.0,
            "cache": {"max_size": 10, "ttl": 60},
        },
        "enrichment": {"batch_size": 5, "progress_start": 85, "progress_end": 100},
    }
