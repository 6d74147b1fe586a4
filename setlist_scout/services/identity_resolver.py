"""Identity resolution between the catalog and the identity graph.

Given the artist the user picked from a catalog search, ask the identity
graph which canonical artist links to the same catalog URL.  When the
identity graph knows the artist AND its name passes the loose name-match
test, the archive can be queried by identity ID instead of by (ambiguous)
name.

A missing candidate, a failed name test, or a failed lookup all yield
``IdentityMatch(matched=False)``.  None of them are errors: they only route
the archive search to the name-keyed query.
"""

from __future__ import annotations

import structlog

from setlist_scout.interfaces.cache_provider import ICacheProvider
from setlist_scout.interfaces.identity_graph_provider import (
    IdentityCandidate,
    IIdentityGraphProvider,
)
from setlist_scout.models.artist import ArtistRef, IdentityMatch
from setlist_scout.utils.errors import SetlistScoutError
from setlist_scout.utils.logging import get_logger
from setlist_scout.utils.text_normalizer import is_artist_name_match

_CACHE_PREFIX = "identity:"


class IdentityResolver:
    """Map an :class:`ArtistRef` to an :class:`IdentityMatch`.

    Parameters
    ----------
    identity_graph:
        URL-keyed reverse lookup provider.
    cache:
        Optional cache for lookups keyed by catalog URL.  Only successful
        lookups (including "no candidate") are cached.
    """

    def __init__(
        self,
        identity_graph: IIdentityGraphProvider,
        cache: ICacheProvider | None = None,
    ) -> None:
        self._identity_graph = identity_graph
        self._cache = cache
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def resolve(self, artist: ArtistRef) -> IdentityMatch:
        if not artist.catalog_url:
            return IdentityMatch()

        try:
            candidate = await self._lookup(artist.catalog_url)
        except (SetlistScoutError, ValueError) as exc:
            self._logger.warning(
                "identity_lookup_failed",
                artist=artist.name,
                provider=self._identity_graph.get_provider_name(),
                error=str(exc),
            )
            return IdentityMatch()

        if candidate is None:
            return IdentityMatch()

        matched = is_artist_name_match(artist.name, candidate.name)
        self._logger.info(
            "identity_resolved",
            artist=artist.name,
            identity_name=candidate.name,
            matched=matched,
        )
        return IdentityMatch(
            identity_graph_id=candidate.id,
            identity_graph_name=candidate.name,
            matched=matched,
        )

    async def _lookup(self, url: str) -> IdentityCandidate | None:
        key = f"{_CACHE_PREFIX}{url}"
        if self._cache is not None:
            cached = await self._cache.get(key)
            if cached is not None:
                return IdentityCandidate(**cached) if cached.get("id") else None

        candidate = await self._identity_graph.lookup_by_url(url)

        if self._cache is not None:
            value = {"id": candidate.id, "name": candidate.name} if candidate else {"id": None}
            await self._cache.set(key, value)
        return candidate
