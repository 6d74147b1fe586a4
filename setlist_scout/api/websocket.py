"""WebSocket transport for progress channels.

Same events as the SSE transport, sent as JSON text messages.

# ─── HOW WEBSOCKET PROGRESS WORKS (Junior Developer Guide) ────────────
#
#   Browser                              Backend (this file)
#   ───────                              ──────────────────
#   ws = new WebSocket(url)   ──────→   websocket.accept()
#                                        channels.open()
#                             ←──────   {"type": "connection", "clientId": ...}
#   POST search_with_updates  ──────→   (routes.py starts the pipeline)
#                             ←──────   {"type": "update", ...}  (repeated)
#                             ←──────   {"type": "complete" | "error", ...}
#                                        websocket.close()
#
# Two tasks run side by side: one forwards channel events, the other
# waits for the browser to disconnect.  Whichever finishes first cancels
# the other, and the channel is always closed on the way out.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import contextlib

import structlog
from fastapi import WebSocket, WebSocketDisconnect

from setlist_scout.pipeline.progress_channel import ProgressChannelManager
from setlist_scout.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


async def _forward_events(
    websocket: WebSocket,
    channels: ProgressChannelManager,
    client_id: str,
) -> None:
    async for event in channels.events(client_id):
        await websocket.send_json(event.to_wire())


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    with contextlib.suppress(WebSocketDisconnect):
        while True:
            await websocket.receive_text()


async def websocket_progress(websocket: WebSocket) -> None:
    """Open a progress channel and stream it to the connected client."""
    channels: ProgressChannelManager = websocket.app.state.channels

    await websocket.accept()
    client_id = channels.open()
    _logger.info("websocket_connected", client_id=client_id)

    sender = asyncio.create_task(_forward_events(websocket, channels, client_id))
    receiver = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        done, pending = await asyncio.wait(
            {sender, receiver},
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
        for task in pending:
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if sender in done:
            error = sender.exception()
            if error is None:
                await websocket.close()
            elif not isinstance(error, WebSocketDisconnect):
                _logger.error("websocket_send_failed", client_id=client_id, error=str(error))
        else:
            _logger.info("websocket_disconnected", client_id=client_id)
    finally:
        channels.close(client_id)
