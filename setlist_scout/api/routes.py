"""FastAPI API routes for SetlistScout.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP (Junior Developer Guide) ───────────────────────────
#
# Endpoint                                   Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/setlist/search_with_updates        POST    Start a run, results via channel
# /api/v1/setlist/search                     POST    Run synchronously, return result
# /api/v1/setlist/artist_search              POST    Catalog artist search
# /api/v1/setlist/artist/{identity_id}/tours GET     Tours on the first archive page
# /api/v1/setlist/{setlist_id}/tour          GET     Band and tour of one setlist
# /api/v1/events/connect                     GET     SSE progress channel (events.py)
# /api/v1/health                             GET     Health check + provider status
# /ws/progress                               WS      WebSocket progress channel
#
# A background run is only accepted for a channel the client already
# opened (SSE or WebSocket) and that is not already running a search.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request

from setlist_scout import __version__
from setlist_scout.api.schemas import (
    AcceptedResponse,
    ArtistSearchRequest,
    ErrorResponse,
    HealthResponse,
    SearchRequest,
    SearchResponse,
    SearchWithUpdatesRequest,
    SetlistTourResponse,
    TourListResponse,
)
from setlist_scout.interfaces.catalog_provider import ICatalogProvider
from setlist_scout.interfaces.setlist_archive_provider import ISetlistArchiveProvider
from setlist_scout.models.catalog import CatalogArtist
from setlist_scout.pipeline.orchestrator import SetlistPipeline, client_status, user_message
from setlist_scout.pipeline.progress_channel import ProgressChannelManager
from setlist_scout.services.tour_selector import select_tour, summarize_tours
from setlist_scout.utils.errors import ChannelConflictError, SetlistScoutError
from setlist_scout.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_pipeline(request: Request) -> SetlistPipeline:
    return request.app.state.pipeline


def _get_channels(request: Request) -> ProgressChannelManager:
    return request.app.state.channels


def _get_archive(request: Request) -> ISetlistArchiveProvider:
    return request.app.state.archive


def _get_catalog(request: Request) -> ICatalogProvider:
    return request.app.state.catalog


PipelineDep = Annotated[SetlistPipeline, Depends(_get_pipeline)]
ChannelsDep = Annotated[ProgressChannelManager, Depends(_get_channels)]
ArchiveDep = Annotated[ISetlistArchiveProvider, Depends(_get_archive)]
CatalogDep = Annotated[ICatalogProvider, Depends(_get_catalog)]


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@router.post(
    "/setlist/search_with_updates",
    response_model=AcceptedResponse,
    status_code=202,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Start a search whose progress and result arrive on a channel",
)
async def search_with_updates(
    body: SearchWithUpdatesRequest,
    background_tasks: BackgroundTasks,
    pipeline: PipelineDep,
    channels: ChannelsDep,
) -> AcceptedResponse:
    """Accept the request and run the pipeline after responding."""
    client_id = body.client_id
    if not client_id:
        raise HTTPException(status_code=400, detail="Missing clientId")
    if not channels.is_open(client_id):
        raise HTTPException(status_code=404, detail=f"No open progress channel: {client_id}")

    try:
        channels.mark_running(client_id)
    except ChannelConflictError as exc:
        _logger.warning("search_rejected_running", client_id=client_id, artist=body.artist.name)
        raise HTTPException(status_code=409, detail=exc.message) from exc

    background_tasks.add_task(pipeline.run, body.artist, client_id)
    _logger.info("search_accepted", client_id=client_id, artist=body.artist.name)
    return AcceptedResponse(client_id=client_id)


@router.post(
    "/setlist/search",
    response_model=SearchResponse,
    responses={
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Run a search and return the ranked songs in the response",
)
async def search(body: SearchRequest, pipeline: PipelineDep) -> SearchResponse:
    try:
        state = await pipeline.execute(body.artist)
    except SetlistScoutError as exc:
        status = client_status(exc)
        _logger.warning("search_failed", artist=body.artist.name, status=status, error=str(exc))
        raise HTTPException(status_code=status, detail=user_message(status)) from exc

    result = pipeline.build_result(state)
    return SearchResponse(tour_data=result.tour_data, ranked_songs=result.ranked_songs)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


@router.post(
    "/setlist/artist_search",
    response_model=list[CatalogArtist],
    summary="Search the catalog for artists by name",
)
async def artist_search(body: ArtistSearchRequest, catalog: CatalogDep) -> list[CatalogArtist]:
    return await catalog.search_artists(body.artist_name)


@router.get(
    "/setlist/artist/{identity_id}/tours",
    response_model=TourListResponse,
    summary="Summarize the tours on an artist's most recent archive page",
)
async def artist_tours(identity_id: str, archive: ArchiveDep) -> TourListResponse:
    page = await archive.search_by_identity_id(identity_id)
    summaries = summarize_tours(page.performances)
    if not summaries:
        return TourListResponse(identity_id=identity_id)

    artist_name = next(iter(summaries))
    selected = select_tour(summaries, artist_name)
    return TourListResponse(
        identity_id=identity_id,
        artist_name=artist_name,
        tours=list(summaries[artist_name].values()),
        selected_tour=selected.tour_name if selected else None,
    )


@router.get(
    "/setlist/{setlist_id}/tour",
    response_model=SetlistTourResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Band and tour name for one setlist",
)
async def setlist_tour(setlist_id: str, archive: ArchiveDep) -> SetlistTourResponse:
    info = await archive.get_setlist(setlist_id)
    return SetlistTourResponse(band_name=info.band_name, tour_name=info.tour_name)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request, channels: ChannelsDep) -> HealthResponse:
    """Healthy when every upstream has credentials configured."""
    providers: dict[str, Any] = dict(getattr(request.app.state, "provider_registry", {}))
    configured = [value for value in providers.values() if isinstance(value, bool)]
    status = "healthy" if configured and all(configured) else "degraded"
    return HealthResponse(
        status=status,
        version=__version__,
        providers=providers,
        open_channels=channels.open_count,
    )
