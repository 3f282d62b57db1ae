"""
Resilient page fetcher.

Issues one logical GET and keeps retrying transient failures until it
reaches a terminal outcome: content, not found, or a permanent failure.
Used for both listing pages and company detail pages.
"""

import asyncio
import errno
import socket
from typing import Dict, Optional

import aiohttp

from theorg_crawler.config import CrawlerSettings, DEFAULT_SETTINGS
from theorg_crawler.fetchers.retry import RetryPolicy, unbounded_transient_retry
from theorg_crawler.models import FetchResult
from theorg_crawler.utils.logging import get_logger

logger = get_logger()

# Socket errnos worth waiting out: connection reset and connect timeout
TRANSIENT_ERRNOS = frozenset({errno.ECONNRESET, errno.ETIMEDOUT})


class TransientFetchError(Exception):
    """Raised by a single attempt when the request should be repeated."""


def is_transient_error(error: BaseException) -> bool:
    """
    Whether a request error is a connectivity problem worth retrying.

    Timeouts, connection resets, server disconnects and DNS resolution
    failures are transient. Refused connections, TLS/certificate errors
    and everything else are permanent.
    """
    if isinstance(error, asyncio.TimeoutError):
        return True
    if isinstance(error, (aiohttp.ClientSSLError, aiohttp.ClientConnectorCertificateError)):
        return False
    if isinstance(error, aiohttp.ServerDisconnectedError):
        return True
    if isinstance(error, aiohttp.ClientConnectorError):
        return is_transient_error(error.os_error)
    if isinstance(error, (socket.gaierror, ConnectionResetError)):
        return True
    if isinstance(error, OSError):
        return error.errno in TRANSIENT_ERRNOS
    return False


class ResilientFetcher:
    """Fetches URLs, retrying transient failures according to a RetryPolicy."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        settings: Optional[CrawlerSettings] = None,
        policy: Optional[RetryPolicy] = None
    ):
        """
        Initialize fetcher.

        Args:
            session: aiohttp session shared by all requests of a crawl
            settings: Crawler settings (timeout, headers, retry delay)
            policy: Retry policy for transient failures. Defaults to the
                unbounded transient policy built from settings.
        """
        self.session = session
        self.settings = settings or DEFAULT_SETTINGS
        self.policy = policy or unbounded_transient_retry(
            delay=self.settings.transient_retry_delay,
            max_retries=self.settings.max_transient_retries,
        )
        self.timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout)

    def get_headers(self) -> Dict[str, str]:
        """Get default HTTP headers."""
        return {"User-Agent": self.settings.user_agent}

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a URL until a terminal outcome is reached.

        Args:
            url: Absolute URL to fetch

        Returns:
            FetchResult with status content, not_found or failure
        """
        retry = 0
        while True:
            try:
                return await self._fetch_once(url)
            except TransientFetchError as e:
                retry += 1
                if not self.policy.allows(retry):
                    logger.error(f"{e} while fetching {url}. Giving up after {retry - 1} retries.")
                    return FetchResult.failure(str(e))
                logger.warning(
                    f"{e} while fetching {url}. "
                    f"Retry {self.policy.describe(retry)} in {self.policy.delay}s..."
                )
                await self._wait(self.policy.delay)

    async def _fetch_once(self, url: str) -> FetchResult:
        """Single request. Raises TransientFetchError for retryable outcomes."""
        try:
            async with self.session.get(
                url,
                headers=self.get_headers(),
                timeout=self.timeout
            ) as resp:
                if resp.status == 404:
                    logger.error(f"Page not found (404) for {url}. Skipping.")
                    return FetchResult.not_found()
                if resp.status >= 500:
                    raise TransientFetchError(f"Server error ({resp.status})")
                if resp.status >= 400:
                    logger.error(f"Client error ({resp.status}) while fetching {url}. Skipping.")
                    return FetchResult.failure(f"HTTP {resp.status}", status_code=resp.status)
                body = await resp.text(errors="replace")
                return FetchResult.content(body, status_code=resp.status)

        except TransientFetchError:
            raise

        except (asyncio.TimeoutError, aiohttp.ClientError, OSError, ValueError) as e:
            if is_transient_error(e):
                raise TransientFetchError(f"Network error ({type(e).__name__})") from e
            logger.error(f"Failed to fetch {url}: {type(e).__name__}: {e}")
            return FetchResult.failure(str(e) or type(e).__name__)

    async def _wait(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    @staticmethod
    def create_connector(limit: int) -> aiohttp.TCPConnector:
        """Create a TCP connector with appropriate limits."""
        return aiohttp.TCPConnector(limit=limit)
