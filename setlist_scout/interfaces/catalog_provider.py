"""Abstract base class for music catalog providers.

The catalog (e.g. Spotify) supplies artist search for the client and
per-song metadata (album art, album name, playable URI) for enrichment.
Access uses a machine-credential token obtained once per enrichment run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from setlist_scout.models.catalog import CatalogArtist, CatalogTrack


class ICatalogProvider(ABC):
    """Contract for music catalog services."""

    @abstractmethod
    async def get_access_token(self) -> str:
        """Exchange client credentials for a bearer token.

        Raises
        ------
        setlist_scout.utils.errors.SetlistScoutError
            If the token exchange fails.
        """

    @abstractmethod
    async def search_artists(self, query: str, token: str | None = None) -> list[CatalogArtist]:
        """Free-text artist search.

        Parameters
        ----------
        query:
            The text the user typed.
        token:
            Bearer token; a fresh one is fetched when omitted.
        """

    @abstractmethod
    async def search_track(self, token: str, track_name: str, artist_name: str) -> CatalogTrack | None:
        """Find the best catalog match for one song.

        Returns
        -------
        CatalogTrack or None
            ``None`` when the catalog has no result (after any spelling
            fallback).  A miss is not an error.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"spotify"``."""
