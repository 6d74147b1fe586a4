"""Catalog enrichment of the ranked song list.

One access token is fetched per run and reused for every lookup.  Songs are
looked up in fixed-size batches; the songs of a batch are searched
concurrently (the catalog fetcher caps real concurrency and spacing) and the
next batch starts when the previous one has settled.

Every tallied song comes back as an :class:`EnrichedSong`, in the original
ranked order:
    - found in the catalog   → catalog fields filled in
    - not found              → catalog fields left ``None``
    - lookup raised          → catalog fields ``None`` and ``lookup_error`` set
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Awaitable, Callable

import structlog

from setlist_scout.interfaces.catalog_provider import ICatalogProvider
from setlist_scout.models.catalog import CatalogTrack
from setlist_scout.models.songs import EnrichedSong, SongTally
from setlist_scout.utils.logging import get_logger

# Called with (percent, message) after each batch.
ProgressCallback = Callable[[float, str], Awaitable[None]]


class CatalogEnrichmentService:
    """Attach catalog metadata to tallied songs.

    Parameters
    ----------
    catalog:
        Catalog provider (already wired to the catalog fetcher).
    batch_size:
        Songs looked up per batch.
    progress_start, progress_end:
        Overall-pipeline percentage band swept as batches complete.
    """

    def __init__(
        self,
        catalog: ICatalogProvider,
        batch_size: int = 5,
        progress_start: float = 85.0,
        progress_end: float = 100.0,
    ) -> None:
        self._catalog = catalog
        self._batch_size = max(1, batch_size)
        self._progress_start = progress_start
        self._progress_end = progress_end
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def enrich(
        self,
        songs: list[SongTally],
        on_progress: ProgressCallback | None = None,
    ) -> list[EnrichedSong]:
        """Look up every song and return them enriched, in input order."""
        if not songs:
            return []

        token = await self._catalog.get_access_token()
        total = len(songs)
        batch_count = math.ceil(total / self._batch_size)
        enriched: list[EnrichedSong] = []

        for index in range(batch_count):
            batch = songs[index * self._batch_size:(index + 1) * self._batch_size]
            results = await asyncio.gather(
                *(self._catalog.search_track(token, s.song_name, s.artist_name) for s in batch),
                return_exceptions=True,
            )
            for tally, result in zip(batch, results):
                enriched.append(self._merge(tally, result))

            if on_progress is not None:
                done = min((index + 1) * self._batch_size, total)
                span = self._progress_end - self._progress_start
                percent = self._progress_start + ((index + 1) / batch_count) * span
                await on_progress(percent, f"Looking up tracks ({done}/{total})...")

        found = sum(1 for song in enriched if song.found)
        self._logger.info(
            "enrichment_complete",
            songs=total,
            found=found,
            missing=total - found,
            batches=batch_count,
        )
        return enriched

    def _merge(self, tally: SongTally, result: CatalogTrack | BaseException | None) -> EnrichedSong:
        base = tally.model_dump()
        if isinstance(result, Exception):
            self._logger.warning(
                "enrichment_lookup_failed",
                song=tally.song_name,
                artist=tally.artist_name,
                error=str(result),
            )
            return EnrichedSong(**base, lookup_error=str(result) or type(result).__name__)
        if isinstance(result, BaseException):
            raise result
        if result is None:
            return EnrichedSong(**base)
        return EnrichedSong(
            **base,
            catalog_song_name=result.name,
            catalog_artist_name=result.artist_name,
            image_url=result.image_small,
            image_url_medium=result.image_medium,
            album_name=result.album_name,
            release_date=result.release_date,
            playable_uri=result.uri,
        )
