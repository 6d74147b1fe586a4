"""Pydantic request/response schemas for the SetlistScout API.

# ─── HOW SCHEMAS WORK (Junior Developer Guide) ────────────────────────
#
# Request bodies are validated against these models before a route runs;
# response models control what is serialized back.  The browser client
# speaks camelCase, so every schema uses ``alias_generator=to_camel``
# with ``populate_by_name=True``: Python code uses snake_case, JSON uses
# camelCase, and FastAPI serializes responses by alias.
#
# Convention: request schemas end with "Request", response schemas end
# with "Response".
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from setlist_scout.models.artist import ArtistRef
from setlist_scout.models.setlist import TourSummary
from setlist_scout.models.songs import EnrichedSong, TourData

_CAMEL = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class SearchWithUpdatesRequest(BaseModel):
    """Trigger a background search whose results arrive on a progress channel.

    ``client_id`` is optional at the schema level so a missing ID is
    reported as 400 rather than a validation error.
    """

    model_config = _CAMEL

    artist: ArtistRef
    client_id: str | None = None


class SearchRequest(BaseModel):
    """Run a search synchronously and return the result in the response."""

    model_config = _CAMEL

    artist: ArtistRef


class AcceptedResponse(BaseModel):
    """Returned with 202 when a background search has been scheduled."""

    model_config = _CAMEL

    message: str = "Request accepted, processing started"
    client_id: str


class SearchResponse(BaseModel):
    """Headline tour data plus the ranked, enriched song list."""

    model_config = _CAMEL

    tour_data: TourData
    ranked_songs: list[EnrichedSong] = Field(default_factory=list)


class ArtistSearchRequest(BaseModel):
    model_config = _CAMEL

    artist_name: str = Field(min_length=1)


class TourListResponse(BaseModel):
    """Tours found on the first archive page for an identity-graph artist."""

    model_config = _CAMEL

    identity_id: str
    artist_name: str | None = None
    tours: list[TourSummary] = Field(default_factory=list)
    selected_tour: str | None = None


class SetlistTourResponse(BaseModel):
    model_config = _CAMEL

    band_name: str
    tour_name: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
    status_code: int | None = None


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]
    open_channels: int = 0
