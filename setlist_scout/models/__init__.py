"""SetlistScout domain models: re-exports all public model classes.

Submodules by concern:
    - artist.py  : caller artist reference and identity-graph match
    - catalog.py : catalog search results (artists, tracks, images)
    - setlist.py : archive performances, pages and tour summaries
    - songs.py   : tallies, enriched songs and the final search result
    - pipeline.py: run state machine and progress events
"""

from setlist_scout.models.artist import ArtistRef, IdentityMatch
from setlist_scout.models.catalog import CatalogArtist, CatalogImage, CatalogTrack
from setlist_scout.models.pipeline import (
    EventType,
    PageFetchFailure,
    PipelineRunState,
    PipelineStage,
    ProgressEvent,
    ProgressStage,
)
from setlist_scout.models.setlist import (
    NO_TOUR_SENTINEL,
    Performance,
    SelectedTour,
    SetlistPage,
    SetlistTourInfo,
    SetSection,
    SongEntry,
    TourSummary,
)
from setlist_scout.models.songs import (
    EnrichedSong,
    SearchResult,
    SongTally,
    TallyResult,
    TourData,
)

__all__ = [
    "NO_TOUR_SENTINEL",
    "ArtistRef",
    "CatalogArtist",
    "CatalogImage",
    "CatalogTrack",
    "EnrichedSong",
    "EventType",
    "IdentityMatch",
    "PageFetchFailure",
    "Performance",
    "PipelineRunState",
    "PipelineStage",
    "ProgressEvent",
    "ProgressStage",
    "SearchResult",
    "SelectedTour",
    "SetSection",
    "SetlistPage",
    "SetlistTourInfo",
    "SongEntry",
    "SongTally",
    "TallyResult",
    "TourData",
    "TourSummary",
]
