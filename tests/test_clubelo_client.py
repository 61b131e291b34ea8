"""
Tests for the ClubElo fetcher: retry policy, timeouts and URL building.

Uses httpx.MockTransport so no request leaves the process; backoff sleeps
are patched out.
"""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from clubratings.etl.clubelo_client import ClubEloClient, backoff_seconds, format_source_date
from clubratings.etl.errors import FetchExhausted, MalformedInput, SourceHTTPError

from conftest import FIXTURE_HEADER, RATING_HEADER

BASE = "http://api.clubelo.test"
SNAPSHOT_CSV = f"{RATING_HEADER}\n1,ManCity,ENG,1,2050.5,2025-11-18,2025-11-19\n"


class ScriptedTransport:
    """Returns the scripted outcomes in order and records requested URLs."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.urls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.urls.append(str(request.url))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        status, body = outcome
        return httpx.Response(status, text=body)

    @property
    def calls(self) -> int:
        return len(self.urls)


def make_client(handler, **kwargs) -> ClubEloClient:
    kwargs.setdefault("max_attempts", 3)
    kwargs.setdefault("timeout", 5.0)
    return ClubEloClient(base_url=BASE, transport=httpx.MockTransport(handler), **kwargs)


@pytest.fixture
def no_sleep():
    with patch("clubratings.etl.clubelo_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


class TestBackoff:
    def test_doubles_per_attempt(self):
        assert [backoff_seconds(n) for n in (1, 2, 3)] == [2, 4, 8]


class TestFetchRetry:
    """Transient failures are retried; terminal ones are not."""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, no_sleep):
        transport = ScriptedTransport((200, "hello"))
        async with make_client(transport) as client:
            assert await client.fetch_text(f"{BASE}/x") == "hello"

        assert transport.calls == 1
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_two_failures_then_success(self, no_sleep):
        request = httpx.Request("GET", f"{BASE}/x")
        transport = ScriptedTransport(
            (503, "busy"),
            httpx.ConnectError("connection refused", request=request),
            (200, "ok"),
        )
        async with make_client(transport) as client:
            assert await client.fetch_text(f"{BASE}/x") == "ok"

        assert transport.calls == 3
        assert [c.args[0] for c in no_sleep.await_args_list] == [2, 4]

    @pytest.mark.asyncio
    async def test_exhausted_after_max_attempts(self, no_sleep):
        transport = ScriptedTransport((500, "a"), (502, "b"), (503, "c"))
        async with make_client(transport) as client:
            with pytest.raises(FetchExhausted) as exc_info:
                await client.fetch_text(f"{BASE}/x")

        assert transport.calls == 3
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_error, SourceHTTPError)
        assert exc_info.value.last_error.status_code == 503
        # no sleep after the final attempt
        assert no_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_client_error_is_terminal(self, no_sleep):
        transport = ScriptedTransport((404, "not found"), (200, "never"))
        async with make_client(transport) as client:
            with pytest.raises(FetchExhausted) as exc_info:
                await client.fetch_text(f"{BASE}/x")

        assert transport.calls == 1
        assert exc_info.value.attempts == 1
        assert exc_info.value.last_error.status_code == 404
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transport_timeout_is_terminal(self, no_sleep):
        request = httpx.Request("GET", f"{BASE}/x")
        transport = ScriptedTransport(httpx.ReadTimeout("timed out", request=request), (200, "never"))
        async with make_client(transport) as client:
            with pytest.raises(FetchExhausted):
                await client.fetch_text(f"{BASE}/x")

        assert transport.calls == 1

    @pytest.mark.asyncio
    async def test_attempt_deadline_is_terminal(self, no_sleep):
        calls = 0

        async def hang(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            await asyncio.Event().wait()
            return httpx.Response(200, text="never")

        async with make_client(hang) as client:
            with pytest.raises(FetchExhausted) as exc_info:
                await client.fetch_text(f"{BASE}/x", timeout=0.05)

        assert calls == 1
        assert isinstance(exc_info.value.last_error, (asyncio.TimeoutError, httpx.TimeoutException))

    @pytest.mark.asyncio
    async def test_single_attempt_budget(self, no_sleep):
        transport = ScriptedTransport((500, "x"))
        async with make_client(transport, max_attempts=1) as client:
            with pytest.raises(FetchExhausted):
                await client.fetch_text(f"{BASE}/x")
        assert transport.calls == 1
        no_sleep.assert_not_awaited()


class TestFetchPreconditions:
    @pytest.mark.asyncio
    async def test_zero_attempts_rejected(self):
        transport = ScriptedTransport()
        async with make_client(transport) as client:
            with pytest.raises(ValueError):
                await client.fetch_text(f"{BASE}/x", max_attempts=0)
        assert transport.calls == 0

    @pytest.mark.asyncio
    async def test_relative_url_rejected(self):
        transport = ScriptedTransport()
        async with make_client(transport) as client:
            with pytest.raises(ValueError):
                await client.fetch_text("/2025-11-18")
        assert transport.calls == 0


class TestSourceEndpoints:
    """URL building and parsing for the three source endpoints."""

    @pytest.mark.asyncio
    async def test_snapshot(self):
        transport = ScriptedTransport((200, SNAPSHOT_CSV))
        async with make_client(transport) as client:
            rows = await client.fetch_snapshot(date(2025, 11, 18))

        assert transport.urls == [f"{BASE}/2025-11-18"]
        assert rows[0]["Club"] == "ManCity"

    @pytest.mark.asyncio
    async def test_snapshot_rejects_bad_date_string(self):
        async with make_client(ScriptedTransport()) as client:
            with pytest.raises(ValueError, match="YYYY-MM-DD"):
                await client.fetch_snapshot("18/11/2025")

    @pytest.mark.asyncio
    async def test_history_name_is_url_encoded(self):
        transport = ScriptedTransport((200, f"{RATING_HEADER}\n"))
        async with make_client(transport) as client:
            rows = await client.fetch_history("Bodo/Glimt")

        assert rows == []
        assert transport.urls == [f"{BASE}/Bodo%2FGlimt"]

    @pytest.mark.asyncio
    async def test_fixtures_with_and_without_date(self):
        body = f"{FIXTURE_HEADER}\n2025-11-22,ENG,Premier League,Arsenal,Tottenham,1,1,2010,1820,0.6,0.2,0.2\n"
        transport = ScriptedTransport((200, body), (200, body))
        async with make_client(transport) as client:
            upcoming = await client.fetch_fixtures()
            one_day = await client.fetch_fixtures("2025-11-22")

        assert transport.urls == [f"{BASE}/fixtures", f"{BASE}/fixtures/2025-11-22"]
        assert upcoming[0]["AwayTeam"] == "Tottenham"
        assert len(one_day) == 1

    @pytest.mark.asyncio
    async def test_unparseable_body_raises_malformed(self):
        transport = ScriptedTransport((200, f'{RATING_HEADER}\n1,"ManCity,ENG\n'))
        async with make_client(transport) as client:
            with pytest.raises(MalformedInput):
                await client.fetch_snapshot("2025-11-18")


class TestFormatSourceDate:
    def test_accepts_date_and_iso_string(self):
        assert format_source_date(date(2025, 1, 2)) == "2025-01-02"
        assert format_source_date("2025-01-02") == "2025-01-02"

    @pytest.mark.parametrize("value", ["2025-1-2", "20250102", "", "11/18/2025"])
    def test_rejects_other_forms(self, value):
        with pytest.raises(ValueError):
            format_source_date(value)
