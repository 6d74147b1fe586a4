"""Orchestrator for the tour resolution and song aggregation pipeline.

Sequences identity resolution, tour selection, paginated aggregation,
tallying and catalog enrichment for one artist, advancing a frozen
:class:`PipelineRunState` via ``model_copy`` and reporting progress into
the client's :class:`ProgressChannelManager` channel.

ARCHITECTURE NOTE (for junior developers):
    The run is a small state machine:

        STARTED → IDENTITY_RESOLVED → TOUR_SELECTED → AGGREGATED →
        TALLIED → ENRICHED → COMPLETE          (FAILED from anywhere)

    Each forward transition publishes exactly one ``update`` event.
    Sub-step reports (the 5% "start", the 15% identity lookup, the 45%
    tour grouping and the 85→100% enrichment sweep) are extra updates in
    between; ``progress`` never goes backwards.

    There are TWO entry points:
        - execute() → raises on failure, publishes ``complete`` on success.
                      Used directly by the synchronous search endpoint.
        - run()     → wraps execute() for background runs; never raises,
                      turns any failure into a single terminal ``error``
                      event with a client-facing status code.

    The orchestrator never touches a transport.  When the client has gone
    away, publishing is a logged no-op and the run simply finishes.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from setlist_scout.interfaces.setlist_archive_provider import ISetlistArchiveProvider
from setlist_scout.models.artist import ArtistRef, IdentityMatch
from setlist_scout.models.pipeline import (
    STAGE_ORDER,
    PageFetchFailure,
    PipelineRunState,
    PipelineStage,
    ProgressStage,
)
from setlist_scout.models.setlist import SetlistPage
from setlist_scout.models.songs import SearchResult, TourData
from setlist_scout.pipeline.progress_channel import ProgressChannelManager
from setlist_scout.services.enrichment_service import CatalogEnrichmentService
from setlist_scout.services.identity_resolver import IdentityResolver
from setlist_scout.services.song_tally import tally_songs
from setlist_scout.services.tour_aggregator import TourAggregator
from setlist_scout.services.tour_selector import select_tour, summarize_tours
from setlist_scout.utils.errors import (
    GATEWAY_STATUSES,
    NoSetlistDataError,
    PipelineError,
    SetlistScoutError,
    UpstreamHTTPError,
)
from setlist_scout.utils.logging import get_logger

# Client-facing messages, keyed by the status sent with the error event.
USER_ERROR_MESSAGES: dict[int, str] = {
    429: "Too many requests - try again later",
    404: "No setlist information available for this artist",
    504: "Setlist service is currently unavailable. Please try again later.",
    500: "Internal Server Error. Please try again later.",
}


def client_status(exc: BaseException) -> int:
    """Map a failure to the status code reported to the client."""
    if not isinstance(exc, SetlistScoutError):
        return 500
    status = exc.status_code
    if status in (404, 429):
        return status
    if status in GATEWAY_STATUSES:
        return 504
    return 500


def user_message(status_code: int) -> str:
    return USER_ERROR_MESSAGES.get(status_code, USER_ERROR_MESSAGES[500])


class SetlistPipeline:
    """Run the full pipeline for one artist.

    All collaborators are injected; the two rate-limited fetchers they
    share are process-wide and owned by the application.
    """

    def __init__(
        self,
        identity_resolver: IdentityResolver,
        archive: ISetlistArchiveProvider,
        tour_aggregator: TourAggregator,
        enrichment_service: CatalogEnrichmentService,
        channels: ProgressChannelManager,
    ) -> None:
        self._identity_resolver = identity_resolver
        self._archive = archive
        self._tour_aggregator = tour_aggregator
        self._enrichment_service = enrichment_service
        self._channels = channels
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def run(self, artist: ArtistRef, client_id: str) -> PipelineRunState:
        """Execute in the background; failures become one ``error`` event.

        Returns the COMPLETE state on success, or a FAILED state carrying
        ``error_status`` and ``error_message``.
        """
        try:
            return await self.execute(artist, client_id=client_id)
        except Exception as exc:
            status = client_status(exc)
            message = user_message(status)
            if isinstance(exc, SetlistScoutError):
                self._logger.warning(
                    "pipeline_failed",
                    client_id=client_id,
                    artist=artist.name,
                    status=status,
                    error=str(exc),
                )
            else:
                self._logger.exception(
                    "pipeline_crashed",
                    client_id=client_id,
                    artist=artist.name,
                    error=str(exc),
                )
            await self._channels.publish_error(client_id, message, status_code=status)
            return PipelineRunState(
                client_id=client_id,
                artist=artist,
                stage=PipelineStage.FAILED,
                completed_at=datetime.now(tz=timezone.utc),  # noqa: UP017
                error_status=status,
                error_message=message,
            )

    async def execute(self, artist: ArtistRef, client_id: str | None = None) -> PipelineRunState:
        """Run every stage and return the COMPLETE state.

        When *client_id* is given, progress and the final ``complete``
        event are published to that channel.

        Raises
        ------
        SetlistScoutError
            On any stage-fatal failure (no data, throttling, upstream down).
        """
        state = PipelineRunState(client_id=client_id, artist=artist)
        self._logger.info("pipeline_started", client_id=client_id, artist=artist.name)

        state = await self._report(
            state, ProgressStage.START, f"Starting search for {artist.name}", 5
        )

        # -- Identity ----------------------------------------------------
        state = await self._report(
            state,
            ProgressStage.IDENTITY,
            "Contacting MusicBrainz for artist identification",
            15,
        )
        identity = await self._identity_resolver.resolve(artist)
        if identity.matched:
            message = f"Found exact match for {artist.name} on MusicBrainz, getting setlist data"
        else:
            message = f"Searching Setlist.fm for {artist.name}"
        state = await self._transition(
            state,
            PipelineStage.IDENTITY_RESOLVED,
            ProgressStage.SETLIST_SEARCH,
            message,
            30,
            identity=identity,
        )

        # -- Tour selection ----------------------------------------------
        first_page = await self._first_page(artist, identity)
        if first_page.is_empty:
            raise NoSetlistDataError(provider_name=self._archive.get_provider_name())

        state = await self._report(
            state, ProgressStage.TOUR_PROCESSING, "Processing tour information", 45
        )
        selected = select_tour(summarize_tours(first_page.performances), artist.name)
        if selected is None:
            raise NoSetlistDataError(provider_name=self._archive.get_provider_name())

        if selected.is_sentinel:
            message = "No specific tour found, using recent performances"
        else:
            message = f'Fetching setlists for "{selected.tour_name}" tour'
        state = await self._transition(
            state,
            PipelineStage.TOUR_SELECTED,
            ProgressStage.SETLIST_FETCH,
            message,
            55,
            first_page=first_page,
            selected_tour=selected,
        )

        # -- Aggregation -------------------------------------------------
        pages = await self._tour_aggregator.aggregate(artist, identity, selected, first_page)
        if isinstance(pages, PageFetchFailure):
            raise UpstreamHTTPError(
                status_code=pages.status_code,
                message=pages.message,
                provider_name=self._archive.get_provider_name(),
            )
        if not any(page.performances for page in pages):
            raise NoSetlistDataError(provider_name=self._archive.get_provider_name())

        state = await self._transition(
            state,
            PipelineStage.AGGREGATED,
            ProgressStage.SONG_PROCESSING,
            "Analyzing setlists and counting song frequencies",
            70,
            pages=pages,
        )

        # -- Tally -------------------------------------------------------
        tally = tally_songs(pages, main_artist=selected.artist_name)
        state = await self._transition(
            state,
            PipelineStage.TALLIED,
            ProgressStage.ENRICHMENT,
            "Starting Spotify song lookup...",
            85,
            tally=tally,
        )

        # -- Enrichment --------------------------------------------------
        async def on_progress(percent: float, message: str) -> None:
            await self._publish(client_id, ProgressStage.ENRICHMENT, message, percent)

        enriched = await self._enrichment_service.enrich(tally.songs, on_progress=on_progress)
        state = await self._transition(
            state,
            PipelineStage.ENRICHED,
            ProgressStage.ENRICHMENT,
            "All songs processed!",
            100,
            enriched_songs=enriched,
        )

        # -- Complete ----------------------------------------------------
        result = self.build_result(state)
        state = self._advance(
            state,
            PipelineStage.COMPLETE,
            completed_at=datetime.now(tz=timezone.utc),  # noqa: UP017
        )
        if client_id is not None:
            await self._channels.publish_complete(client_id, result.to_payload())

        self._logger.info(
            "pipeline_complete",
            client_id=client_id,
            artist=artist.name,
            tour=result.tour_data.tour_name,
            total_shows=result.tour_data.total_shows,
            songs=len(result.ranked_songs),
        )
        return state

    @staticmethod
    def build_result(state: PipelineRunState) -> SearchResult:
        """Assemble the ``complete`` payload from an ENRICHED state."""
        if state.selected_tour is None or state.tally is None:
            raise PipelineError(f"Cannot build a result from stage {state.stage.value}")
        return SearchResult(
            tour_data=TourData(
                band_name=state.artist.name,
                tour_name=state.selected_tour.tour_name,
                total_shows=state.tally.total_shows_with_data,
            ),
            ranked_songs=state.enriched_songs,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _first_page(self, artist: ArtistRef, identity: IdentityMatch) -> SetlistPage:
        if identity.matched and identity.identity_graph_id:
            return await self._archive.search_by_identity_id(identity.identity_graph_id)
        return await self._archive.search_by_artist_name(artist.name)

    def _advance(self, state: PipelineRunState, target: PipelineStage, **updates: object) -> PipelineRunState:
        """Move *state* one step forward, rejecting skips and reversals."""
        current = STAGE_ORDER.index(state.stage)
        if target not in STAGE_ORDER or STAGE_ORDER.index(target) != current + 1:
            raise PipelineError(
                f"Invalid pipeline transition {state.stage.value} -> {target.value}"
            )
        return state.model_copy(update={"stage": target, **updates})

    async def _transition(
        self,
        state: PipelineRunState,
        target: PipelineStage,
        stage: ProgressStage,
        message: str,
        percent: float,
        **updates: object,
    ) -> PipelineRunState:
        state = self._advance(state, target, **updates)
        self._logger.debug(
            "pipeline_transition",
            client_id=state.client_id,
            stage=target.value,
            progress=percent,
        )
        return await self._report(state, stage, message, percent)

    async def _report(
        self,
        state: PipelineRunState,
        stage: ProgressStage,
        message: str,
        percent: float,
    ) -> PipelineRunState:
        percent = max(percent, state.progress_percent)
        await self._publish(state.client_id, stage, message, percent)
        return state.model_copy(update={"progress_percent": percent})

    async def _publish(
        self,
        client_id: str | None,
        stage: ProgressStage,
        message: str,
        percent: float,
    ) -> None:
        if client_id is None:
            return
        await self._channels.publish_update(client_id, stage.value, message, percent)
