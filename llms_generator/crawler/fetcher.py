"""
HTTP fetcher shared by the sitemap resolver, link discoverer and worker pool.

Uses aiohttp with a per-request timeout and linear-backoff retries for
transport failures. HTTP error statuses are returned, never retried.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import aiohttp
from aiohttp import ClientTimeout, ClientError

from ..utils.constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_BACKOFF_MS,
)
from ..utils.errors import NetworkError, RequestTimeoutError
from ..utils.log import get_logger


@dataclass
class FetchResponse:
    """A fully read HTTP response."""

    url: str
    status: int
    reason: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    charset: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return ""

    @property
    def text(self) -> str:
        """Body decoded with the response charset (UTF-8 fallback)."""
        encoding = self.charset or "utf-8"
        try:
            return self.body.decode(encoding, errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


class Fetcher:
    """
    Performs HTTP GET requests with timeout and retry.

    Must be used as an async context manager so the underlying
    aiohttp session is opened and closed once per generation run.
    """

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        retries: int = DEFAULT_RETRIES,
        backoff_ms: int = DEFAULT_RETRY_BACKOFF_MS,
        user_agent: str = DEFAULT_USER_AGENT,
        headers: Optional[Mapping[str, str]] = None
    ):
        """
        Initialize the fetcher.

        Args:
            timeout_ms: Total timeout per attempt in milliseconds
            retries: Total number of attempts for transport failures
            backoff_ms: Base backoff; attempt N waits backoff_ms * N
            user_agent: User agent string for requests
            headers: Extra request headers (override the user agent if set)
        """
        self.timeout = ClientTimeout(total=timeout_ms / 1000)
        self.retries = max(1, retries)
        self.backoff_ms = backoff_ms
        self.headers = {"User-Agent": user_agent}
        self.headers.update(headers or {})
        self.logger = get_logger("fetcher")
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "Fetcher":
        self._session = aiohttp.ClientSession(
            timeout=self.timeout,
            headers=self.headers
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def fetch(self, url: str) -> FetchResponse:
        """
        Fetch a URL, retrying transport failures.

        Args:
            url: URL to fetch

        Returns:
            FetchResponse (possibly with a non-2xx status)

        Raises:
            RequestTimeoutError: If the final attempt timed out
            NetworkError: If the final attempt failed for another reason
        """
        if self._session is None:
            raise RuntimeError("Fetcher must be used inside 'async with'")

        for attempt in range(1, self.retries + 1):
            try:
                return await self._get(url)
            except (ClientError, asyncio.TimeoutError, OSError) as e:
                if attempt >= self.retries:
                    raise self._wrap_error(url, e) from e

                delay = self.backoff_ms * attempt / 1000
                self.logger.debug(
                    f"Fetch attempt {attempt}/{self.retries} failed for {url}: "
                    f"{e!r}; retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)

        # Unreachable: the loop either returns or raises
        raise NetworkError(f"Failed to fetch after {self.retries} attempts", url)

    async def _get(self, url: str) -> FetchResponse:
        """Perform a single GET and read the whole body."""
        async with self._session.get(url, allow_redirects=True) as response:
            body = await response.read()
            return FetchResponse(
                url=str(response.url),
                status=response.status,
                reason=response.reason or "",
                headers=dict(response.headers),
                body=body,
                charset=response.charset
            )

    def _wrap_error(self, url: str, error: BaseException):
        """Map the last transport failure to a generator error."""
        if isinstance(error, asyncio.TimeoutError):
            return RequestTimeoutError(
                f"Request timed out after {self.timeout.total:.1f}s: {url}",
                url,
                error
            )
        return NetworkError(f"{type(error).__name__}: {error}", url, error)
