"""Server-Sent Events transport for progress channels.

Opening ``GET /api/v1/events/connect`` registers a channel and streams
its events as ``data:`` JSON frames.  The first frame is the
``connection`` event carrying the ``clientId`` the browser then sends
with ``search_with_updates``.  The stream ends after the terminal event;
a client disconnect closes the channel, and later publishes for it are
dropped.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator

import structlog
from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse

from setlist_scout.pipeline.progress_channel import ProgressChannelManager
from setlist_scout.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/events")


async def stream_channel(channels: ProgressChannelManager, client_id: str) -> AsyncIterator[dict[str, str]]:
    """Yield SSE frames for an already-open channel until it terminates."""
    try:
        async for event in channels.events(client_id):
            yield {"data": json.dumps(event.to_wire())}
    finally:
        channels.close(client_id)
        _logger.info("sse_stream_closed", client_id=client_id)


@router.get("/connect", summary="Open a progress channel as an event stream")
async def connect(request: Request) -> EventSourceResponse:
    channels: ProgressChannelManager = request.app.state.channels
    client_id = channels.open()
    _logger.info("sse_client_connected", client_id=client_id)
    return EventSourceResponse(stream_channel(channels, client_id), ping=15)
