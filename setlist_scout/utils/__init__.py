"""Utility modules for SetlistScout.

- **errors** -- Exception hierarchy rooted at SetlistScoutError; every class
  carries the status code used when the failure is reported to a client.
- **logging** -- structlog configuration and ``get_logger``.
- **rate_limiter** -- Throttled, retrying HTTP fetcher (one per upstream).
- **text_normalizer** -- Artist-name normalization and the loose match test.
"""

from setlist_scout.utils.errors import (
    ChannelConflictError,
    ConfigurationError,
    NoSetlistDataError,
    PipelineError,
    ProviderUnavailableError,
    RateLimitError,
    SetlistScoutError,
    UpstreamHTTPError,
)
from setlist_scout.utils.logging import configure_logging, get_logger
from setlist_scout.utils.text_normalizer import is_artist_name_match, normalize_for_match

__all__ = [
    "ChannelConflictError",
    "ConfigurationError",
    "NoSetlistDataError",
    "PipelineError",
    "ProviderUnavailableError",
    "RateLimitError",
    "SetlistScoutError",
    "UpstreamHTTPError",
    "configure_logging",
    "get_logger",
    "is_artist_name_match",
    "normalize_for_match",
]
