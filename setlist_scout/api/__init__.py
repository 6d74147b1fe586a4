"""SetlistScout API layer: routes, schemas, progress transports, and middleware."""

from setlist_scout.api.events import router as events_router
from setlist_scout.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from setlist_scout.api.routes import router
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
from setlist_scout.api.websocket import websocket_progress

__all__ = [
    "AcceptedResponse",
    "ArtistSearchRequest",
    "ErrorHandlingMiddleware",
    "ErrorResponse",
    "HealthResponse",
    "RequestLoggingMiddleware",
    "SearchRequest",
    "SearchResponse",
    "SearchWithUpdatesRequest",
    "SetlistTourResponse",
    "TourListResponse",
    "configure_cors",
    "events_router",
    "router",
    "websocket_progress",
]
