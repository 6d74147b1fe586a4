"""Pipeline state and progress-event models.

All models are frozen.  The orchestrator advances a
:class:`PipelineRunState` by producing new copies via
``model_copy(update={...})``, and every progress report is an immutable
:class:`ProgressEvent` written into the client's channel.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from setlist_scout.models.artist import ArtistRef, IdentityMatch
from setlist_scout.models.setlist import SelectedTour, SetlistPage
from setlist_scout.models.songs import EnrichedSong, TallyResult


# ---------------------------------------------------------------------------
# PipelineStage: the per-request state machine.
# ---------------------------------------------------------------------------
class PipelineStage(str, Enum):  # noqa: UP042
    """States of one resolution run.

        STARTED → IDENTITY_RESOLVED → TOUR_SELECTED → AGGREGATED →
        TALLIED → ENRICHED → COMPLETE

    FAILED is reachable from any non-terminal state.
    """

    STARTED = "STARTED"
    IDENTITY_RESOLVED = "IDENTITY_RESOLVED"
    TOUR_SELECTED = "TOUR_SELECTED"
    AGGREGATED = "AGGREGATED"
    TALLIED = "TALLIED"
    ENRICHED = "ENRICHED"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineStage.COMPLETE, PipelineStage.FAILED)


# Forward order; used to reject backwards or skipping transitions.
STAGE_ORDER: tuple[PipelineStage, ...] = (
    PipelineStage.STARTED,
    PipelineStage.IDENTITY_RESOLVED,
    PipelineStage.TOUR_SELECTED,
    PipelineStage.AGGREGATED,
    PipelineStage.TALLIED,
    PipelineStage.ENRICHED,
    PipelineStage.COMPLETE,
)


class ProgressStage(str, Enum):  # noqa: UP042
    """Stage labels as they appear on the wire."""

    START = "start"
    IDENTITY = "musicbrainz"
    SETLIST_SEARCH = "setlist_search"
    TOUR_PROCESSING = "tour_processing"
    SETLIST_FETCH = "setlist_fetch"
    SONG_PROCESSING = "song_processing"
    ENRICHMENT = "spotify_search"
    COMPLETE = "complete"
    ERROR = "error"


class EventType(str, Enum):  # noqa: UP042
    CONNECTION = "connection"
    UPDATE = "update"
    COMPLETE = "complete"
    ERROR = "error"


# ---------------------------------------------------------------------------
# ProgressEvent: one message on a client's channel.
# ---------------------------------------------------------------------------
class ProgressEvent(BaseModel):
    """A progress report addressed to one client.

    ``data`` is only set on ``complete``; ``status_code`` only on ``error``.
    """

    model_config = ConfigDict(frozen=True)

    type: EventType
    message: str
    stage: str | None = None
    progress: float | None = Field(default=None, ge=0.0, le=100.0)
    data: dict[str, Any] | None = None
    status_code: int | None = None
    client_id: str | None = None
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )

    @property
    def is_terminal(self) -> bool:
        return self.type in (EventType.COMPLETE, EventType.ERROR)

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON object sent to clients (unset keys omitted)."""
        payload: dict[str, Any] = {
            "type": self.type.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.stage is not None:
            payload["stage"] = self.stage
        if self.progress is not None:
            payload["progress"] = round(self.progress, 1)
        if self.data is not None:
            payload["data"] = self.data
        if self.status_code is not None:
            payload["statusCode"] = self.status_code
        if self.client_id is not None:
            payload["clientId"] = self.client_id
        return payload


# ---------------------------------------------------------------------------
# PageFetchFailure: structured failure returned (not raised) by aggregation.
# ---------------------------------------------------------------------------
class PageFetchFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    status_code: int
    message: str
    page: int | None = None


# ---------------------------------------------------------------------------
# PipelineRunState: snapshot of one run.
# ---------------------------------------------------------------------------
class PipelineRunState(BaseModel):
    """Everything one run has produced so far.

    Immutable; use model_copy(update={...}) to produce new states.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str | None = None
    artist: ArtistRef
    stage: PipelineStage = PipelineStage.STARTED
    progress_percent: float = Field(default=0.0, ge=0.0, le=100.0)
    identity: IdentityMatch | None = None
    first_page: SetlistPage | None = None
    selected_tour: SelectedTour | None = None
    pages: list[SetlistPage] = Field(default_factory=list)
    tally: TallyResult | None = None
    enriched_songs: list[EnrichedSong] = Field(default_factory=list)
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )
    completed_at: datetime | None = None
    error_status: int | None = None
    error_message: str | None = None
