"""SetlistScout FastAPI application entry point.

Wires together providers, services, the pipeline and routes via
dependency injection.  Loads configuration from ``.env`` and
``config/config.yaml`` and configures structured logging.

# ─── SHARED RESOURCES (Junior Developer Guide) ────────────────────────
#
# _build_all() runs once per process, inside the lifespan handler:
#
#   httpx.AsyncClient ─┬─ archive RateLimitedFetcher ── SetlistFmProvider
#                      ├─ catalog RateLimitedFetcher ── SpotifyProvider
#                      └─ MusicBrainzProvider (own 1 req/s spacing)
#
# The two fetchers are the only state shared between concurrent
# pipeline runs; every run goes through the same pair, so upstream
# throttles hold across clients.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, WebSocket

from setlist_scout import __version__
from setlist_scout.api.events import router as events_router
from setlist_scout.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from setlist_scout.api.routes import router as api_router
from setlist_scout.api.websocket import websocket_progress
from setlist_scout.config.loader import load_config
from setlist_scout.config.settings import Settings
from setlist_scout.pipeline.orchestrator import SetlistPipeline
from setlist_scout.pipeline.progress_channel import ProgressChannelManager
from setlist_scout.providers.cache.memory_cache import MemoryCacheProvider
from setlist_scout.providers.catalog.spotify_provider import SpotifyProvider
from setlist_scout.providers.identity.musicbrainz_provider import MusicBrainzProvider
from setlist_scout.providers.setlist.setlistfm_provider import SetlistFmProvider
from setlist_scout.services.enrichment_service import CatalogEnrichmentService
from setlist_scout.services.identity_resolver import IdentityResolver
from setlist_scout.services.tour_aggregator import TourAggregator
from setlist_scout.utils.logging import configure_logging, get_logger
from setlist_scout.utils.rate_limiter import RateLimitedFetcher, RateLimiterConfig

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    # -- Shared resources --
    http_config = app_config.get("http", {})
    http_client = httpx.AsyncClient(timeout=float(http_config.get("timeout", 30.0)))

    archive_config = app_config.get("archive", {})
    catalog_config = app_config.get("catalog", {})
    identity_config = app_config.get("identity", {})
    enrichment_config = app_config.get("enrichment", {})

    archive_fetcher = RateLimitedFetcher(
        http_client,
        RateLimiterConfig.from_dict(archive_config.get("rate_limit"), max_concurrent=1, min_interval=0.6),
        provider_name="setlistfm",
    )
    catalog_fetcher = RateLimitedFetcher(
        http_client,
        RateLimiterConfig.from_dict(catalog_config.get("rate_limit"), max_concurrent=5, min_interval=0.2),
        provider_name="spotify",
    )

    # -- Providers --
    archive = SetlistFmProvider(
        fetcher=archive_fetcher,
        api_key=app_settings.setlist_api_key,
        **({"base_url": archive_config["base_url"]} if "base_url" in archive_config else {}),
    )
    catalog = SpotifyProvider(
        fetcher=catalog_fetcher,
        client_id=app_settings.spotify_client_id,
        client_secret=app_settings.spotify_client_secret,
        **{key: catalog_config[key] for key in ("api_url", "token_url") if key in catalog_config},
        smart_track_selection=bool(catalog_config.get("smart_track_selection", False)),
    )
    identity_graph = MusicBrainzProvider(
        http_client=http_client,
        user_agent=app_settings.musicbrainz_user_agent(),
        **{key: identity_config[key] for key in ("base_url", "min_interval") if key in identity_config},
    )

    cache_config = identity_config.get("cache", {})
    identity_cache = MemoryCacheProvider(
        max_size=int(cache_config.get("max_size", 1000)),
        ttl=int(cache_config.get("ttl", 86400)),
    )

    # -- Services --
    identity_resolver = IdentityResolver(identity_graph=identity_graph, cache=identity_cache)
    tour_aggregator = TourAggregator(archive=archive)
    enrichment_service = CatalogEnrichmentService(
        catalog=catalog,
        batch_size=int(enrichment_config.get("batch_size", 5)),
        progress_start=float(enrichment_config.get("progress_start", 85)),
        progress_end=float(enrichment_config.get("progress_end", 100)),
    )
    channels = ProgressChannelManager()

    pipeline = SetlistPipeline(
        identity_resolver=identity_resolver,
        archive=archive,
        tour_aggregator=tour_aggregator,
        enrichment_service=enrichment_service,
        channels=channels,
    )

    # -- Provider registry (for health endpoint) --
    missing = set(app_settings.missing_credentials())
    provider_registry: dict[str, Any] = {
        archive.get_provider_name(): "setlist_api_key" not in missing,
        catalog.get_provider_name(): not ({"spotify_client_id", "spotify_client_secret"} & missing),
        identity_graph.get_provider_name(): True,
    }

    return {
        "http_client": http_client,
        "archive_fetcher": archive_fetcher,
        "catalog_fetcher": catalog_fetcher,
        "archive": archive,
        "catalog": catalog,
        "identity_graph": identity_graph,
        "identity_cache": identity_cache,
        "identity_resolver": identity_resolver,
        "tour_aggregator": tour_aggregator,
        "enrichment_service": enrichment_service,
        "channels": channels,
        "pipeline": pipeline,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Build all components on startup, close the shared HTTP client on shutdown."""
    components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    missing = settings.missing_credentials()
    if missing:
        _logger.warning("credentials_missing", missing=missing)

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        providers=components["provider_registry"],
    )

    yield

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="SetlistScout API",
        version=__version__,
        description=(
            "Pick an artist, find the tour they are on, and rank the songs "
            "they have been playing across every show of it, with catalog "
            "metadata and live progress over SSE or WebSocket."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=settings.cors_origins)

    # -- API routes --
    application.include_router(api_router)
    application.include_router(events_router)

    # -- WebSocket --
    @application.websocket("/ws/progress")
    async def ws_progress(websocket: WebSocket) -> None:
        await websocket_progress(websocket)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "setlist_scout.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
