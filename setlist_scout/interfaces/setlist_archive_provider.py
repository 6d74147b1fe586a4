"""Abstract base class for setlist archive providers.

Defines the read-only contract for a community setlist archive (e.g.
setlist.fm): paginated performance searches keyed by artist name, by
identity-graph ID, or by tour, plus a single-setlist lookup.  Concrete
adapters route every request through the archive's shared
:class:`~setlist_scout.utils.rate_limiter.RateLimitedFetcher`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from setlist_scout.models.setlist import SetlistPage, SetlistTourInfo


class ISetlistArchiveProvider(ABC):
    """Contract for setlist archive services."""

    @abstractmethod
    async def search_by_artist_name(
        self,
        artist_name: str,
        page: int = 1,
        tour_name: str | None = None,
    ) -> SetlistPage:
        """Search performances by artist name.

        Parameters
        ----------
        artist_name:
            Display name to search for.  Same-named artists may be mixed
            into the results.
        page:
            1-based page number.
        tour_name:
            Restrict the search to one tour.

        Returns
        -------
        SetlistPage
            The page, empty when the archive has no data for the artist.

        Raises
        ------
        setlist_scout.utils.errors.SetlistScoutError
            Rate limit exhaustion, gateway failures and other HTTP errors.
        """

    @abstractmethod
    async def search_by_identity_id(
        self,
        identity_id: str,
        page: int = 1,
        tour_name: str | None = None,
    ) -> SetlistPage:
        """Search performances by identity-graph artist ID.

        Same parameters and failure modes as :meth:`search_by_artist_name`.
        """

    @abstractmethod
    async def get_setlist(self, setlist_id: str) -> SetlistTourInfo:
        """Look up a single setlist and return its artist and tour name."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"setlistfm"``."""
