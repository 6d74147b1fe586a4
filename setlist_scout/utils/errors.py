"""Custom exception hierarchy for SetlistScout.

All application exceptions inherit from :class:`SetlistScoutError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "setlistfm", "spotify", "musicbrainz") caused the
failure, and a ``status_code`` used when the failure is reported to a client.

The hierarchy is organized by failure kind:

    SetlistScoutError  (base -- catch-all, status 500)
    +-- UpstreamHTTPError        (non-2xx response, carries upstream status)
    |   +-- RateLimitError       (429 still returned after every retry)
    +-- ProviderUnavailableError (gateway failure / unreachable, status 504)
    +-- NoSetlistDataError       (artist has no performances, status 404)
    +-- PipelineError            (orchestration / stage failures)
    +-- ConfigurationError       (startup / missing credentials)
    +-- ChannelConflictError     (second run for an already-busy channel, 409)

The pipeline orchestrator never lets these escape to the HTTP layer of a
background run: it maps ``status_code`` to a terminal ``error`` event.
"""

from __future__ import annotations

# Gateway-style upstream statuses that mean "service unreachable".
GATEWAY_STATUSES = frozenset({502, 503, 504})


class SetlistScoutError(Exception):
    """Base exception for all SetlistScout errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[setlistfm] Rate limit exceeded``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Upstream HTTP errors
# ---------------------------------------------------------------------------

class UpstreamHTTPError(SetlistScoutError):
    """Raised when an upstream service answers with a non-success status.

    The original upstream status is kept on the instance so callers can
    decide how to surface it.
    """

    def __init__(
        self,
        status_code: int,
        message: str = "Upstream request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self.status_code = status_code


class RateLimitError(UpstreamHTTPError):
    """Raised when an upstream keeps answering 429 after all retries."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(status_code=429, message=message, provider_name=provider_name)


class ProviderUnavailableError(SetlistScoutError):
    """Raised when an external service is unreachable or its gateway fails."""

    status_code = 504

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Domain errors
# ---------------------------------------------------------------------------

class NoSetlistDataError(SetlistScoutError):
    """Raised when an artist has no recorded performances or no usable tour."""

    status_code = 404

    def __init__(
        self,
        message: str = "No setlist information available for this artist",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PipelineError(SetlistScoutError):
    """Raised when pipeline orchestration fails (invalid transition, etc.)."""

    def __init__(
        self,
        message: str = "Pipeline orchestration failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(SetlistScoutError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ChannelConflictError(SetlistScoutError):
    """Raised when a pipeline is triggered for a channel that is already busy."""

    status_code = 409

    def __init__(
        self,
        message: str = "A search is already running for this client",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
