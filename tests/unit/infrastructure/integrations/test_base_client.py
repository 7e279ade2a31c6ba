"""Tests for the shared 429 handling in BaseHttpClient."""

import re
from unittest.mock import AsyncMock

import httpx
import pytest
from pytest_httpx import HTTPXMock
from pytest_mock import MockerFixture

from tunescout.domain.exceptions import RateLimitExceededError
from tunescout.infrastructure.integrations.base_client import (
    BaseHttpClient,
    parse_retry_after,
)

URL = "https://api.example.com/search"
URL_PATTERN = re.compile(r"https://api\.example\.com/search.*")


@pytest.fixture
def no_sleep(mocker: MockerFixture) -> AsyncMock:
    return mocker.patch(
        "tunescout.infrastructure.integrations.base_client.asyncio.sleep",
        new_callable=AsyncMock,
    )


class TestParseRetryAfter:
    def test_seconds(self) -> None:
        assert parse_retry_after("3") == 3.0

    @pytest.mark.parametrize("value", [None, "", "Wed, 21 Oct 2026 07:28:00 GMT"])
    def test_unparseable(self, value: str | None) -> None:
        assert parse_retry_after(value) is None

    def test_negative_clamped(self) -> None:
        assert parse_retry_after("-2") == 0.0


class TestRateLimitRetry:
    async def test_retries_once_then_succeeds(
        self, httpx_mock: HTTPXMock, no_sleep: AsyncMock
    ) -> None:
        httpx_mock.add_response(url=URL_PATTERN, status_code=429, headers={"Retry-After": "2"})
        httpx_mock.add_response(url=URL_PATTERN, json={"ok": True})

        async with BaseHttpClient(max_rate_limit_retries=1) as client:
            response = await client._api_request("GET", URL, params={"q": "x"})

        assert response.status_code == 200
        no_sleep.assert_awaited_once_with(2.0)

    async def test_wait_is_capped(self, httpx_mock: HTTPXMock, no_sleep: AsyncMock) -> None:
        httpx_mock.add_response(url=URL_PATTERN, status_code=429, headers={"Retry-After": "120"})
        httpx_mock.add_response(url=URL_PATTERN, json={})

        async with BaseHttpClient(max_rate_limit_retries=1) as client:
            await client._api_request("GET", URL)

        no_sleep.assert_awaited_once_with(5.0)

    async def test_gives_up_after_retries(
        self, httpx_mock: HTTPXMock, no_sleep: AsyncMock
    ) -> None:
        httpx_mock.add_response(url=URL_PATTERN, status_code=429, headers={"Retry-After": "1"})
        httpx_mock.add_response(url=URL_PATTERN, status_code=429, headers={"Retry-After": "7"})

        async with BaseHttpClient(max_rate_limit_retries=1) as client:
            with pytest.raises(RateLimitExceededError) as exc_info:
                await client._api_request("GET", URL)

        assert exc_info.value.retry_after == 7.0
        assert no_sleep.await_count == 1

    async def test_no_retries_configured(
        self, httpx_mock: HTTPXMock, no_sleep: AsyncMock
    ) -> None:
        httpx_mock.add_response(url=URL_PATTERN, status_code=429)

        async with BaseHttpClient(max_rate_limit_retries=0) as client:
            with pytest.raises(RateLimitExceededError):
                await client._api_request("GET", URL)

        no_sleep.assert_not_awaited()

    async def test_other_errors_are_returned(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=URL_PATTERN, status_code=503)

        async with BaseHttpClient() as client:
            response = await client._api_request("GET", URL)

        assert response.status_code == 503


class TestClientOwnership:
    async def test_injected_client_is_not_closed(self) -> None:
        shared = httpx.AsyncClient()
        client = BaseHttpClient(http_client=shared)

        await client.close()

        assert not shared.is_closed
        await shared.aclose()

    async def test_lazy_client_is_closed(self) -> None:
        client = BaseHttpClient()
        created = await client._get_client()

        await client.close()

        assert created.is_closed
