"""HTTP fetching for remote and git standards sources.

Wraps a single aiohttp session with timeouts, bounded concurrency and retry
with exponential backoff. Fetch methods never raise: every outcome is
reported through a ``FetchResult``.
"""

import asyncio
import json
import logging
import random
from typing import Any, Dict, Optional
from dataclasses import dataclass

import aiohttp

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}
DEFAULT_USER_AGENT = "standards-hub/1.0"

@dataclass
class FetchResult:
    """Result of fetching a single URL."""
    url: str
    status_code: int
    content: Optional[str] = None
    data: Any = None
    error: Optional[str] = None
    retry_count: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status_code < 300

class HttpFetcher:
    """Asynchronous HTTP client shared by the remote and git sources."""

    def __init__(self,
                 request_timeout: float = 30,
                 max_retries: int = 2,
                 retry_delay: float = 0.5,
                 max_retry_delay: float = 8.0,
                 max_concurrent: int = 8,
                 user_agent: str = DEFAULT_USER_AGENT):
        """Initialize fetcher.

        Args:
            request_timeout: Per-request timeout in seconds
            max_retries: Maximum number of retry attempts
            retry_delay: Base delay between retries (seconds)
            max_retry_delay: Maximum delay between retries (seconds)
            max_concurrent: Maximum concurrent requests
            user_agent: User agent string
        """
        self.request_timeout = request_timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay
        self.max_concurrent = max_concurrent
        self.user_agent = user_agent
        self.session: Optional[aiohttp.ClientSession] = None
        self.semaphore = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self):
        connector = aiohttp.TCPConnector(limit=self.max_concurrent * 2)
        timeout = aiohttp.ClientTimeout(total=self.request_timeout)

        self.session = aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            headers={'User-Agent': self.user_agent}
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the underlying session."""
        if self.session:
            await self.session.close()
            self.session = None

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate exponential backoff delay with jitter."""
        base_delay = self.retry_delay * (2 ** attempt)
        jitter = random.uniform(0.1, 0.3) * base_delay
        return min(base_delay + jitter, self.max_retry_delay)

    def _is_retryable_error(self, exception: Optional[Exception], status_code: Optional[int] = None) -> bool:
        """Determine if an error is retryable."""
        if status_code is not None and status_code in RETRYABLE_STATUS_CODES:
            return True

        if isinstance(exception, (asyncio.TimeoutError, aiohttp.ServerTimeoutError)):
            return True

        # 4xx-style client errors are final; connection problems are not
        return isinstance(exception, (aiohttp.ClientConnectionError,
                                      aiohttp.ServerDisconnectedError))

    async def _request(self, url: str, headers: Optional[Dict[str, str]], as_json: bool) -> FetchResult:
        if not self.session:
            await self.__aenter__()

        last_exception: Optional[Exception] = None
        for attempt in range(self.max_retries + 1):
            try:
                async with self.semaphore:
                    logger.debug(f"Fetching {url} (attempt {attempt + 1}/{self.max_retries + 1})")

                    async with self.session.get(url, headers=headers, allow_redirects=True) as response:
                        if self._is_retryable_error(None, response.status) and attempt < self.max_retries:
                            logger.warning(f"Retryable status {response.status} for {url}, attempt {attempt + 1}/{self.max_retries + 1}")
                            await asyncio.sleep(self._calculate_retry_delay(attempt))
                            continue

                        if not 200 <= response.status < 300:
                            return FetchResult(
                                url=url,
                                status_code=response.status,
                                error=f"HTTP {response.status}: {response.reason}",
                                retry_count=attempt
                            )

                        text = await response.text()
                        result = FetchResult(url=url, status_code=response.status, content=text, retry_count=attempt)
                        if as_json:
                            try:
                                result.data = json.loads(text)
                            except ValueError as e:
                                result.error = f"Invalid JSON body: {e}"
                        return result

            except (asyncio.TimeoutError, aiohttp.ClientError) as e:
                last_exception = e
                if attempt < self.max_retries and self._is_retryable_error(e):
                    delay = self._calculate_retry_delay(attempt)
                    logger.warning(f"Error fetching {url}: {e!r}, retrying in {delay:.2f}s (attempt {attempt + 1}/{self.max_retries + 1})")
                    await asyncio.sleep(delay)
                    continue
                logger.warning(f"Giving up on {url} after {attempt + 1} attempts: {e!r}")
                break

            except UnicodeDecodeError as e:
                last_exception = e
                logger.warning(f"Undecodable response body from {url}: {e}")
                break

        status_code = 408 if isinstance(last_exception, asyncio.TimeoutError) else 0
        return FetchResult(
            url=url,
            status_code=status_code,
            error=repr(last_exception) if last_exception else "Unknown error",
            retry_count=attempt
        )

    async def fetch_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> FetchResult:
        """Fetch a URL and return its body as text."""
        return await self._request(url, headers, as_json=False)

    async def fetch_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> FetchResult:
        """Fetch a URL and decode its body as JSON into ``FetchResult.data``."""
        return await self._request(url, headers, as_json=True)
