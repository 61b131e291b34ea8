"""ClubElo CSV API client with per-attempt timeout and exponential backoff."""

import asyncio
import logging
import re
from datetime import date
from typing import Optional, Union
from urllib.parse import quote, urlsplit

import httpx

from clubratings.config import get_settings
from clubratings.etl.base import RawRow
from clubratings.etl.errors import FetchExhausted, SourceHTTPError
from clubratings.etl.parsing import FIXTURE_COLUMNS, RATING_COLUMNS, parse_rows

logger = logging.getLogger(__name__)

BACKOFF_BASE_SECONDS = 1  # 2s, 4s, 8s, ...
HEADERS = {"User-Agent": "clubratings/1.0 (+clubelo importer)"}

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def format_source_date(value: Union[date, str]) -> str:
    """Render a date for a source URL, validating YYYY-MM-DD strings."""
    if isinstance(value, date):
        return value.isoformat()
    if not _DATE_RE.match(value or ""):
        raise ValueError("Date must be in YYYY-MM-DD format")
    return value


def backoff_seconds(attempt: int) -> int:
    """Wait before the attempt after `attempt` (1-based)."""
    return BACKOFF_BASE_SECONDS * (2 ** attempt)


def _is_terminal(error: Exception) -> bool:
    """4xx responses and timeouts are not worth retrying."""
    if isinstance(error, SourceHTTPError):
        return error.is_client_error
    return isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException))


class ClubEloClient:
    """Fetches rating snapshots, club histories and fixtures as parsed rows."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.CLUBELO_API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self.max_attempts = max_attempts if max_attempts is not None else settings.HTTP_MAX_RETRIES
        self.client = httpx.AsyncClient(
            headers=HEADERS,
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "ClubEloClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.aclose()

    async def _get_once(self, url: str, timeout: float) -> str:
        # wait_for cancels the in-flight request when the attempt times out
        response = await asyncio.wait_for(self.client.get(url, timeout=timeout), timeout)
        if response.status_code >= 300:
            raise SourceHTTPError(response.status_code, url, response.reason_phrase)
        return response.text

    async def fetch_text(
        self,
        url: str,
        max_attempts: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Fetch a URL body, retrying transient failures.

        Args:
            url: Absolute http(s) URL.
            max_attempts: Attempts before giving up (>= 1).
            timeout: Seconds allowed per attempt.

        Returns:
            Response body text.

        Raises:
            FetchExhausted: After a 4xx, a timeout, or max_attempts failures.
        """
        attempts = self.max_attempts if max_attempts is None else max_attempts
        per_attempt = self.timeout if timeout is None else timeout

        if attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"Not an absolute http(s) URL: {url!r}")

        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            logger.info(f"Fetching {url} (attempt {attempt}/{attempts})")
            try:
                text = await self._get_once(url, per_attempt)
                logger.info(f"Fetched {len(text)} bytes from {url}")
                return text
            except (SourceHTTPError, httpx.HTTPError, asyncio.TimeoutError) as e:
                last_error = e
                logger.error(f"Attempt {attempt}/{attempts} failed for {url}: {e!r}")

                if _is_terminal(e):
                    raise FetchExhausted(url, attempt, e) from e

                if attempt < attempts:
                    wait_time = backoff_seconds(attempt)
                    logger.debug(f"Waiting {wait_time}s before retry...")
                    await asyncio.sleep(wait_time)

        raise FetchExhausted(url, attempts, last_error) from last_error

    async def fetch_snapshot(self, snapshot_date: Union[date, str]) -> list[RawRow]:
        """Ratings of every tracked club on one date."""
        url = f"{self.base_url}/{format_source_date(snapshot_date)}"
        return parse_rows(await self.fetch_text(url), RATING_COLUMNS)

    async def fetch_history(self, club_name: str) -> list[RawRow]:
        """Full rating history of one club (name as used by ClubElo, e.g. 'ManCity')."""
        if not club_name or not club_name.strip():
            raise ValueError("Club name is required")
        url = f"{self.base_url}/{quote(club_name.strip(), safe='')}"
        return parse_rows(await self.fetch_text(url), RATING_COLUMNS)

    async def fetch_fixtures(self, fixtures_date: Optional[Union[date, str]] = None) -> list[RawRow]:
        """Upcoming fixtures, optionally restricted to one date."""
        url = f"{self.base_url}/fixtures"
        if fixtures_date is not None:
            url = f"{url}/{format_source_date(fixtures_date)}"
        return parse_rows(await self.fetch_text(url), FIXTURE_COLUMNS)
