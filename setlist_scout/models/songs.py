"""Song tally and enrichment models.

A :class:`SongTally` is a frequency count keyed by ``artist|song``; an
:class:`EnrichedSong` is that tally plus whatever the catalog knew about it.
When the catalog had nothing, every catalog field stays ``None`` and
``found`` is False; the song is still listed so the ranked list never
shrinks.
"""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class SongTally(BaseModel):
    """How many times one song was played across the aggregated shows."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    # Cover artist for covers, the resolved main artist otherwise.
    artist_name: str
    song_name: str
    play_count: int = Field(default=0, ge=0)

    @property
    def key(self) -> str:
        return f"{self.artist_name}|{self.song_name}"


class TallyResult(BaseModel):
    """Output of the tally engine."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    songs: list[SongTally] = Field(default_factory=list)
    total_shows_with_data: int = 0
    main_artist: str | None = None


class EnrichedSong(SongTally):
    """A tallied song merged with its catalog lookup result."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    catalog_song_name: str | None = None
    catalog_artist_name: str | None = None
    image_url: str | None = None
    image_url_medium: str | None = None
    album_name: str | None = None
    release_date: str | None = None
    playable_uri: str | None = None
    # Set when the lookup itself raised, as opposed to finding nothing.
    lookup_error: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def found(self) -> bool:
        return self.catalog_song_name is not None


class TourData(BaseModel):
    """Headline numbers shown above the ranked song list."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    band_name: str
    tour_name: str
    total_shows: int


class SearchResult(BaseModel):
    """Final payload delivered with the ``complete`` event."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    tour_data: TourData
    ranked_songs: list[EnrichedSong] = Field(default_factory=list)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
