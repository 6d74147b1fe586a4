"""Unit tests for the rate-limited fetcher (throttle + 429 retry policy)."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from setlist_scout.utils.errors import (
    ProviderUnavailableError,
    RateLimitError,
    UpstreamHTTPError,
)
from setlist_scout.utils.rate_limiter import RateLimitedFetcher, RateLimiterConfig

_URL = "https://archive.test/rest/1.0/search/setlists"


def _fetcher(statuses: list[int], calls: list[httpx.Request], **config) -> RateLimitedFetcher:
    """Fetcher whose upstream answers with *statuses* in order (last one repeats)."""

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        status = statuses[min(len(calls) - 1, len(statuses) - 1)]
        return httpx.Response(status, json={"attempt": len(calls)})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    limiter_config = RateLimiterConfig(**{"min_interval": 0.0, **config})
    return RateLimitedFetcher(client, limiter_config, provider_name="setlistfm")


class TestRateLimiterConfig:
    def test_defaults_match_archive_policy(self) -> None:
        config = RateLimiterConfig()
        assert config.max_concurrent == 1
        assert config.min_interval == pytest.approx(0.6)
        assert config.max_retries == 3
        assert config.initial_backoff == pytest.approx(1.0)
        assert config.backoff_multiplier == pytest.approx(2.0)

    def test_from_dict_overrides_defaults_and_ignores_unknown_keys(self) -> None:
        config = RateLimiterConfig.from_dict(
            {"min_interval": 0.2, "burst": 99},
            max_concurrent=5,
        )
        assert config.max_concurrent == 5
        assert config.min_interval == pytest.approx(0.2)
        assert config.max_retries == 3

    def test_from_dict_none_uses_defaults(self) -> None:
        assert RateLimiterConfig.from_dict(None) == RateLimiterConfig()


class TestRateLimitedFetcher:
    @pytest.mark.asyncio
    async def test_success_returns_response(self) -> None:
        calls: list[httpx.Request] = []
        fetcher = _fetcher([200], calls)

        response = await fetcher.fetch(httpx.Request("GET", _URL))

        assert response.status_code == 200
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_three_429s_then_success_returns_success(self) -> None:
        calls: list[httpx.Request] = []
        fetcher = _fetcher([429, 429, 429, 200], calls)

        with patch("setlist_scout.utils.rate_limiter.asyncio.sleep", new_callable=AsyncMock) as sleep:
            response = await fetcher.fetch(httpx.Request("GET", _URL))

        assert response.status_code == 200
        assert response.json() == {"attempt": 4}
        assert len(calls) == 4
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_five_429s_exhausts_retries(self) -> None:
        calls: list[httpx.Request] = []
        fetcher = _fetcher([429, 429, 429, 429, 429], calls)

        with patch("setlist_scout.utils.rate_limiter.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(RateLimitError) as exc_info:
                await fetcher.fetch(httpx.Request("GET", _URL))

        assert exc_info.value.status_code == 429
        assert exc_info.value.provider_name == "setlistfm"
        # One initial attempt plus three retries.
        assert len(calls) == 4

    @pytest.mark.asyncio
    async def test_retries_resend_the_same_request(self) -> None:
        calls: list[httpx.Request] = []
        fetcher = _fetcher([429, 200], calls)
        request = httpx.Request("GET", _URL, params={"artistName": '"Aurora"', "p": 2})

        with patch("setlist_scout.utils.rate_limiter.asyncio.sleep", new_callable=AsyncMock):
            await fetcher.fetch(request)

        assert [str(c.url) for c in calls] == [str(request.url), str(request.url)]

    @pytest.mark.asyncio
    async def test_404_is_not_retried(self) -> None:
        calls: list[httpx.Request] = []
        fetcher = _fetcher([404], calls)

        with pytest.raises(UpstreamHTTPError) as exc_info:
            await fetcher.fetch(httpx.Request("GET", _URL))

        assert exc_info.value.status_code == 404
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_500_is_not_retried(self) -> None:
        calls: list[httpx.Request] = []
        fetcher = _fetcher([500], calls)

        with pytest.raises(UpstreamHTTPError) as exc_info:
            await fetcher.fetch(httpx.Request("GET", _URL))

        assert exc_info.value.status_code == 500
        assert not isinstance(exc_info.value, RateLimitError)
        assert len(calls) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [502, 503, 504])
    async def test_gateway_statuses_raise_unavailable(self, status: int) -> None:
        calls: list[httpx.Request] = []
        fetcher = _fetcher([status], calls)

        with pytest.raises(ProviderUnavailableError) as exc_info:
            await fetcher.fetch(httpx.Request("GET", _URL))

        assert exc_info.value.status_code == 504
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_transport_error_raises_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = RateLimitedFetcher(client, RateLimiterConfig(min_interval=0.0), "setlistfm")

        with pytest.raises(ProviderUnavailableError) as exc_info:
            await fetcher.fetch(httpx.Request("GET", _URL))

        assert "connection refused" in exc_info.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [httpx.DecodingError("Malformed gzip body"), httpx.TooManyRedirects("Exceeded maximum allowed redirects")],
    )
    async def test_other_client_errors_raise_unavailable(self, error: httpx.HTTPError) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise error

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = RateLimitedFetcher(client, RateLimiterConfig(min_interval=0.0), "setlistfm")

        with pytest.raises(ProviderUnavailableError):
            await fetcher.fetch(httpx.Request("GET", _URL))

    @pytest.mark.asyncio
    async def test_min_interval_spaces_consecutive_requests(self) -> None:
        calls: list[httpx.Request] = []
        fetcher = _fetcher([200], calls, min_interval=0.6)

        with patch("setlist_scout.utils.rate_limiter.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await fetcher.fetch(httpx.Request("GET", _URL))
            await fetcher.fetch(httpx.Request("GET", _URL))

        # The first request goes out immediately, the second waits out the gap.
        assert sleep.await_count == 1
        waited = sleep.await_args_list[0].args[0]
        assert 0.0 < waited <= 0.6

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("max_concurrent", "requests"), [(1, 6), (5, 12)])
    async def test_in_flight_requests_never_exceed_cap(
        self, max_concurrent: int, requests: int
    ) -> None:
        in_flight = 0
        peak = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return httpx.Response(200)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = RateLimitedFetcher(
            client,
            RateLimiterConfig(max_concurrent=max_concurrent, min_interval=0.0),
            "setlistfm",
        )

        responses = await asyncio.gather(
            *(fetcher.fetch(httpx.Request("GET", _URL)) for _ in range(requests))
        )

        assert len(responses) == requests
        assert peak == max_concurrent
