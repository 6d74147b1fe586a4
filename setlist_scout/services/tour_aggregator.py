"""Paginated fetch of every performance belonging to a selected tour.

The first page is fetched on its own to learn ``total`` and
``itemsPerPage``; every remaining page is then scheduled at once.  The
archive fetcher serializes them (one in flight, fixed spacing), so they
complete in whatever order the limiter lets them, and the results are put
back in page order before returning.

When the selected tour is the "No Tour Info" sentinel, no new query is
issued: the page already fetched during tour selection is the data.

An upstream failure on any page is returned as a :class:`PageFetchFailure`
value rather than raised, so the orchestrator can report its status code.
"""

from __future__ import annotations

import asyncio
from functools import partial

import structlog

from setlist_scout.interfaces.setlist_archive_provider import ISetlistArchiveProvider
from setlist_scout.models.artist import ArtistRef, IdentityMatch
from setlist_scout.models.pipeline import PageFetchFailure
from setlist_scout.models.setlist import SelectedTour, SetlistPage
from setlist_scout.utils.errors import SetlistScoutError
from setlist_scout.utils.logging import get_logger


class TourAggregator:
    """Fetch all archive pages for one tour.

    Parameters
    ----------
    archive:
        Setlist archive provider (already wired to the archive fetcher).
    """

    def __init__(self, archive: ISetlistArchiveProvider) -> None:
        self._archive = archive
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def aggregate(
        self,
        artist: ArtistRef,
        identity: IdentityMatch,
        selected: SelectedTour,
        first_page: SetlistPage,
    ) -> list[SetlistPage] | PageFetchFailure:
        """Return every page for *selected*, in page order.

        Parameters
        ----------
        artist:
            The artist being resolved; its name is used for name-keyed queries.
        identity:
            When ``matched``, pages are queried by identity ID instead of name.
        selected:
            The tour chosen by the tour selector.
        first_page:
            The page the tour was selected from; reused as-is for the
            "No Tour Info" sentinel.
        """
        if selected.is_sentinel:
            self._logger.info(
                "aggregation_reuse_first_page",
                artist=artist.name,
                performances=len(first_page.performances),
            )
            return [first_page]

        if identity.matched and identity.identity_graph_id:
            search = partial(self._archive.search_by_identity_id, identity.identity_graph_id)
        else:
            search = partial(self._archive.search_by_artist_name, artist.name)

        try:
            first = await search(page=1, tour_name=selected.tour_name)
        except SetlistScoutError as exc:
            return self._failure(exc, page=1)

        page_count = first.page_count
        self._logger.info(
            "aggregation_started",
            artist=artist.name,
            tour=selected.tour_name,
            total=first.total,
            pages=page_count,
        )

        page_numbers = list(range(2, page_count + 1))
        results = await asyncio.gather(
            *(search(page=n, tour_name=selected.tour_name) for n in page_numbers),
            return_exceptions=True,
        )

        pages = [first]
        for page_number, result in zip(page_numbers, results):
            if isinstance(result, SetlistScoutError):
                return self._failure(result, page=page_number)
            if isinstance(result, BaseException):
                raise result
            pages.append(result)

        self._logger.info(
            "aggregation_complete",
            artist=artist.name,
            tour=selected.tour_name,
            pages=len(pages),
            performances=sum(len(p.performances) for p in pages),
        )
        return pages

    def _failure(self, exc: SetlistScoutError, page: int) -> PageFetchFailure:
        self._logger.error(
            "aggregation_page_failed",
            page=page,
            status=exc.status_code,
            error=str(exc),
        )
        return PageFetchFailure(status_code=exc.status_code, message=exc.message, page=page)
