"""Abstract base class for identity-graph providers.

An identity graph maps a catalog artist URL to a canonical artist identity
(e.g. a MusicBrainz ID).  The pipeline uses it to tell same-named artists
apart before querying the setlist archive.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class IdentityCandidate:
    """The artist an identity graph links to a URL.

    Attributes
    ----------
    id:
        Identity-graph artist identifier.
    name:
        The artist's canonical name in the identity graph.
    """

    id: str
    name: str


class IIdentityGraphProvider(ABC):
    """Contract for URL-keyed reverse artist lookups."""

    @abstractmethod
    async def lookup_by_url(self, url: str) -> IdentityCandidate | None:
        """Return the artist linked to *url*, or ``None`` if there is none.

        Raises
        ------
        setlist_scout.utils.errors.SetlistScoutError
            If the lookup request itself fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"musicbrainz"``."""
