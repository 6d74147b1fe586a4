"""Per-client progress channels.

A channel is opened by a transport (SSE or WebSocket) when a client
connects, and identified by a ``client_id``.  The orchestrator publishes
:class:`ProgressEvent` values into it; the transport drains them with
:meth:`ProgressChannelManager.events` and writes them to the wire.  The
pipeline never sees the transport.

# ─── CHANNEL LIFECYCLE (Junior Developer Guide) ───────────────────────
#
#   open() ─→ [connection] ─→ update* ─→ complete | error ─→ closed
#                                                     ↑
#   close() (client disconnected) ────────────────────┘
#
#   - Exactly one terminal event (complete or error) is ever queued.
#   - Publishing to an unknown or closed client_id is logged and ignored,
#     so a pipeline whose client went away finishes quietly.
#   - A channel runs at most one pipeline: mark_running() rejects a second
#     trigger with ChannelConflictError.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

import structlog

from setlist_scout.models.pipeline import EventType, ProgressEvent
from setlist_scout.utils.errors import ChannelConflictError
from setlist_scout.utils.logging import get_logger


@dataclass
class _ChannelSession:
    """Internal state of one open channel."""

    client_id: str
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)
    running: bool = False
    # Set once the terminal event is queued; the session stays until close().
    finished: bool = False


class ProgressChannelManager:
    """Registry of open progress channels, keyed by client ID.

    Constructed once at startup and shared by the transports and the
    orchestrator.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, _ChannelSession] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self, client_id: str | None = None) -> str:
        """Register a channel and queue its ``connection`` event.

        Parameters
        ----------
        client_id:
            Use this ID instead of generating one.  Must not already be open.

        Raises
        ------
        ChannelConflictError
            If *client_id* is already open.
        """
        client_id = client_id or str(uuid4())
        if client_id in self._sessions:
            raise ChannelConflictError(message=f"Channel already open: {client_id}")

        session = _ChannelSession(client_id=client_id)
        self._sessions[client_id] = session
        session.queue.put_nowait(
            ProgressEvent(
                type=EventType.CONNECTION,
                message="Connected to server events",
                client_id=client_id,
            )
        )
        self._logger.info("channel_opened", client_id=client_id, open_channels=len(self._sessions))
        return client_id

    def close(self, client_id: str) -> None:
        """Forget a channel (client disconnected).  No-op when already closed."""
        if self._sessions.pop(client_id, None) is not None:
            self._logger.info("channel_closed", client_id=client_id)

    def is_open(self, client_id: str) -> bool:
        session = self._sessions.get(client_id)
        return session is not None and not session.finished

    def mark_running(self, client_id: str) -> None:
        """Claim the channel for one pipeline run.

        Raises
        ------
        KeyError
            If the channel is not open.
        ChannelConflictError
            If a run has already claimed the channel.
        """
        session = self._sessions[client_id]
        if session.finished:
            raise KeyError(client_id)
        if session.running:
            raise ChannelConflictError()
        session.running = True

    @property
    def open_count(self) -> int:
        return sum(1 for session in self._sessions.values() if not session.finished)

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def publish_update(
        self,
        client_id: str,
        stage: str,
        message: str,
        progress: float | None = None,
    ) -> bool:
        """Queue a non-terminal ``update`` event.  Returns False if dropped."""
        event = ProgressEvent(
            type=EventType.UPDATE,
            stage=stage,
            message=message,
            progress=None if progress is None else max(0.0, min(100.0, progress)),
        )
        return self._deliver(client_id, event)

    async def publish_complete(self, client_id: str, data: dict[str, Any]) -> bool:
        """Queue the terminal ``complete`` event; later publishes are dropped."""
        event = ProgressEvent(type=EventType.COMPLETE, message="Process completed", data=data)
        return self._deliver(client_id, event)

    async def publish_error(self, client_id: str, message: str, status_code: int = 500) -> bool:
        """Queue the terminal ``error`` event; later publishes are dropped."""
        event = ProgressEvent(type=EventType.ERROR, message=message, status_code=status_code)
        return self._deliver(client_id, event)

    # ------------------------------------------------------------------
    # Draining
    # ------------------------------------------------------------------

    async def events(self, client_id: str) -> AsyncIterator[ProgressEvent]:
        """Yield queued events for *client_id* until its terminal event.

        A finished channel can still be drained: everything queued up to
        and including the terminal event is delivered.

        Raises
        ------
        KeyError
            If the channel was never opened or has been closed.
        """
        session = self._sessions[client_id]
        while True:
            event: ProgressEvent = await session.queue.get()
            yield event
            if event.is_terminal:
                return

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _deliver(self, client_id: str, event: ProgressEvent) -> bool:
        session = self._sessions.get(client_id)
        if session is None or session.finished:
            self._logger.warning(
                "channel_publish_unknown_client",
                client_id=client_id,
                event_type=event.type.value,
            )
            return False

        session.queue.put_nowait(event)
        self._logger.debug(
            "channel_event_queued",
            client_id=client_id,
            event_type=event.type.value,
            stage=event.stage,
            progress=event.progress,
        )
        if event.is_terminal:
            session.finished = True
            self._logger.info(
                "channel_terminated",
                client_id=client_id,
                event_type=event.type.value,
                status_code=event.status_code,
            )
        return True
