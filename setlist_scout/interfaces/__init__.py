"""Public interface definitions for all external service providers.

Every upstream the pipeline talks to is reached through one of these
abstract base classes.  Concrete adapters live in ``setlist_scout/providers/``
and are wired together in ``setlist_scout/main.py``; tests inject fakes.
"""

from setlist_scout.interfaces.cache_provider import ICacheProvider
from setlist_scout.interfaces.catalog_provider import ICatalogProvider
from setlist_scout.interfaces.identity_graph_provider import (
    IdentityCandidate,
    IIdentityGraphProvider,
)
from setlist_scout.interfaces.setlist_archive_provider import ISetlistArchiveProvider

__all__ = [
    "ICacheProvider",
    "ICatalogProvider",
    "IIdentityGraphProvider",
    "ISetlistArchiveProvider",
    "IdentityCandidate",
]
