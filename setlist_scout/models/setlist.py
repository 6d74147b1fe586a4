"""Setlist archive models.

Raw archive JSON is mapped into these models by the archive provider, so
nothing past the provider layer touches the upstream's nested
``sets.set[].song[]`` shape.

Dates from the archive are ``dd-mm-yyyy`` strings; years are kept as
4-digit strings to match how tours are displayed.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Tour label used when a performance carries no tour name.
NO_TOUR_SENTINEL = "No Tour Info"


class SongEntry(BaseModel):
    """One song as listed in a set section."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    name: str
    is_cover: bool = False
    cover_artist: str | None = None
    # Pre-show tape / intro audio; never counted.
    is_tape: bool = False


class SetSection(BaseModel):
    """A section of a show (main set, encore, ...)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    name: str | None = None
    encore: int | None = None
    songs: list[SongEntry] = Field(default_factory=list)


class Performance(BaseModel):
    """One historical show from the archive."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    setlist_id: str | None = None
    artist_name: str
    tour_name: str = NO_TOUR_SENTINEL
    event_date: str | None = None
    venue_name: str | None = None
    sets: list[SetSection] = Field(default_factory=list)

    @field_validator("tour_name", mode="before")
    @classmethod
    def _default_tour(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return NO_TOUR_SENTINEL
        return value

    @property
    def songs(self) -> list[SongEntry]:
        """Every song across all set sections, in running order."""
        return [song for section in self.sets for song in section.songs]

    @property
    def has_set_data(self) -> bool:
        """True when the archive recorded at least one set section."""
        return len(self.sets) > 0

    @property
    def year(self) -> str | None:
        """Year part of a ``dd-mm-yyyy`` event date, if well-formed."""
        if not self.event_date:
            return None
        parts = self.event_date.split("-")
        if len(parts) != 3:
            return None
        return parts[2]


class SetlistPage(BaseModel):
    """One page of an archive search response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    total: int = 0
    items_per_page: int = 20
    page: int = 1
    performances: list[Performance] = Field(default_factory=list)

    @property
    def page_count(self) -> int:
        """Total number of pages the search spans (at least 1)."""
        if self.items_per_page <= 0 or self.total <= 0:
            return 1
        return max(1, math.ceil(self.total / self.items_per_page))

    @property
    def is_empty(self) -> bool:
        return not self.performances


class TourSummary(BaseModel):
    """Shows grouped under one (artist, tour) pair."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    tour_name: str
    show_count: int = 0
    # Always ascending 4-digit year strings.
    years_seen: list[str] = Field(default_factory=list)

    @property
    def is_sentinel(self) -> bool:
        return self.tour_name.lower() == NO_TOUR_SENTINEL.lower()

    @property
    def latest_year(self) -> int:
        """Most recent year seen, or 0 when no dated shows exist."""
        years = [int(y) for y in self.years_seen if y.isdigit()]
        return max(years) if years else 0


class SelectedTour(BaseModel):
    """The tour chosen for aggregation, with the artist it was chosen for."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    artist_name: str
    tour: TourSummary

    @property
    def tour_name(self) -> str:
        return self.tour.tour_name

    @property
    def is_sentinel(self) -> bool:
        return self.tour.is_sentinel


class SetlistTourInfo(BaseModel):
    """Artist and tour named by a single setlist lookup."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    band_name: str
    tour_name: str | None = None
