"""Rate-limited HTTP fetcher shared by every call to one upstream service.

Each upstream (the setlist archive, the music catalog) gets its own
:class:`RateLimitedFetcher` instance, built once at startup in ``main.py``
and injected into the providers that talk to that service.  Every request
to the upstream goes through :meth:`RateLimitedFetcher.fetch`.

# ─── HOW THE FETCHER THROTTLES (Junior Developer Guide) ────────────────
#
#   caller ──fetch(req)──→ [semaphore: max_concurrent slots]
#                              │
#                              ├─ _throttle(): wait until min_interval has
#                              │  passed since the previous request start
#                              ├─ send
#                              ├─ 429? sleep(backoff), backoff *= multiplier,
#                              │  resend the SAME request (max_retries times)
#                              └─ return response / raise typed error
#
# Retries keep their concurrency slot, so a throttled upstream is never
# hit by a new request while an earlier one is backing off.
#
# Status mapping:
#   2xx             → response returned
#   429 (exhausted) → RateLimitError
#   502 / 503 / 504 → ProviderUnavailableError (no retry)
#   other non-2xx   → UpstreamHTTPError(status_code) (no retry)
#   client error    → ProviderUnavailableError (transport, decoding, redirects)
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from setlist_scout.utils.errors import (
    GATEWAY_STATUSES,
    ProviderUnavailableError,
    RateLimitError,
    UpstreamHTTPError,
)
from setlist_scout.utils.logging import get_logger


@dataclass(frozen=True)
class RateLimiterConfig:
    """Throttle and retry policy for one upstream service."""

    max_concurrent: int = 1
    min_interval: float = 0.6  # seconds between request starts
    max_retries: int = 3
    initial_backoff: float = 1.0
    backoff_multiplier: float = 2.0

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None, **defaults: Any) -> RateLimiterConfig:
        """Build a config from a YAML section, falling back to *defaults*."""
        values = {**defaults, **(raw or {})}
        known = {key: values[key] for key in cls.__dataclass_fields__ if key in values}
        return cls(**known)


class RateLimitedFetcher:
    """Throttled, retrying wrapper around a shared ``httpx.AsyncClient``.

    Parameters
    ----------
    http_client:
        Injected client; connection pooling is shared with the rest of the app.
    config:
        Concurrency, spacing and retry policy.
    provider_name:
        Name attached to raised errors and log lines (e.g. ``"setlistfm"``).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        config: RateLimiterConfig,
        provider_name: str,
    ) -> None:
        self._http = http_client
        self._config = config
        self._provider_name = provider_name
        self._semaphore = asyncio.Semaphore(config.max_concurrent)
        self._spacing_lock = asyncio.Lock()
        self._last_request_time: float = 0.0
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def provider_name(self) -> str:
        return self._provider_name

    @property
    def config(self) -> RateLimiterConfig:
        return self._config

    async def fetch(self, request: httpx.Request) -> httpx.Response:
        """Send *request* under the throttle, retrying on 429.

        Raises
        ------
        RateLimitError
            The upstream still answered 429 after ``max_retries`` retries.
        ProviderUnavailableError
            Gateway failure (502/503/504) or any httpx client error.
        UpstreamHTTPError
            Any other non-success status; never retried.
        """
        async with self._semaphore:
            backoff = self._config.initial_backoff
            attempt = 0
            while True:
                await self._throttle()
                response = await self._send(request)

                if response.is_success:
                    return response

                status = response.status_code
                if status == 429:
                    if attempt < self._config.max_retries:
                        attempt += 1
                        self._logger.warning(
                            "upstream_rate_limited",
                            provider=self._provider_name,
                            url=str(request.url),
                            attempt=attempt,
                            backoff_seconds=backoff,
                        )
                        await asyncio.sleep(backoff)
                        backoff *= self._config.backoff_multiplier
                        continue
                    self._logger.error(
                        "upstream_rate_limit_exhausted",
                        provider=self._provider_name,
                        url=str(request.url),
                        retries=self._config.max_retries,
                    )
                    raise RateLimitError(
                        message=f"Rate limited after {self._config.max_retries} retries",
                        provider_name=self._provider_name,
                    )

                if status in GATEWAY_STATUSES:
                    self._logger.error(
                        "upstream_gateway_failure",
                        provider=self._provider_name,
                        url=str(request.url),
                        status=status,
                    )
                    raise ProviderUnavailableError(
                        message=f"Upstream gateway failure ({status})",
                        provider_name=self._provider_name,
                    )

                self._logger.warning(
                    "upstream_http_error",
                    provider=self._provider_name,
                    url=str(request.url),
                    status=status,
                )
                raise UpstreamHTTPError(
                    status_code=status,
                    message=response.reason_phrase or f"HTTP {status}",
                    provider_name=self._provider_name,
                )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _throttle(self) -> None:
        """Enforce the minimum spacing between request starts."""
        async with self._spacing_lock:
            now = time.monotonic()
            elapsed = now - self._last_request_time
            if self._last_request_time > 0 and elapsed < self._config.min_interval:
                await asyncio.sleep(self._config.min_interval - elapsed)
            self._last_request_time = time.monotonic()

    async def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            return await self._http.send(request)
        except httpx.HTTPError as exc:
            self._logger.error(
                "upstream_unreachable",
                provider=self._provider_name,
                url=str(request.url),
                error=str(exc),
            )
            raise ProviderUnavailableError(
                message=f"Could not reach upstream: {exc}",
                provider_name=self._provider_name,
            ) from exc
