"""Fetching of checksum sources over HTTP.

Connection failures and timeouts are retried here with exponential backoff.
A server that answers with an error status is reported at once, since asking
again will not change the answer.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

import aiohttp

from manifest_hash.constants import (
    CONTENT_PREVIEW_MAX,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_TIMEOUT_SECONDS,
)
from manifest_hash.core.http_session import build_timeout
from manifest_hash.exceptions import HTTPStatusError, TransportError
from manifest_hash.logger import get_logger

if TYPE_CHECKING:
    from manifest_hash.types import Settings

T = TypeVar("T")

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FetchedSource:
    """Body of a fetched checksum source.

    Attributes:
        url: Final URL after redirects.
        status: HTTP status code.
        headers: Response headers.
        body: Raw response body.
        charset: Charset declared by the response, if any.

    """

    url: str
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    charset: str | None = None

    @property
    def text(self) -> str:
        """Body decoded with the declared charset, UTF-8 otherwise."""
        try:
            return self.body.decode(self.charset or "utf-8", errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


class SourceFetcher:
    """Fetches checksum pages and files with transport-level retries."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize fetcher.

        Args:
            session: Shared aiohttp session
            retry_attempts: Attempts per request before giving up
            timeout_seconds: Base timeout for one attempt

        """
        self.session = session
        self.retry_attempts = max(1, retry_attempts)
        self.timeout = build_timeout(timeout_seconds)

    @classmethod
    def from_settings(
        cls, session: aiohttp.ClientSession, settings: Settings
    ) -> SourceFetcher:
        """Create a fetcher using the ``[network]`` settings."""
        network_cfg = settings["network"]
        return cls(
            session,
            retry_attempts=network_cfg["retry_attempts"],
            timeout_seconds=network_cfg["timeout_seconds"],
        )

    async def fetch(self, url: str) -> FetchedSource:
        """GET a checksum source.

        Args:
            url: Source URL

        Returns:
            The fetched source

        Raises:
            HTTPStatusError: If the server answers with a non-2xx status
            TransportError: If every attempt failed to complete

        """

        async def process(response: aiohttp.ClientResponse) -> FetchedSource:
            body = await response.read()
            source = FetchedSource(
                url=str(response.url),
                status=response.status,
                headers=dict(response.headers),
                body=body,
                charset=response.charset,
            )
            preview = source.text[:CONTENT_PREVIEW_MAX]
            logger.debug("Checksum source downloaded successfully")
            logger.debug("   Status: %s", response.status)
            logger.debug("   Content length: %d bytes", len(body))
            logger.debug(
                "   Content preview: %s%s",
                preview,
                "..." if len(body) > CONTENT_PREVIEW_MAX else "",
            )
            return source

        return await self._request_with_retry("GET", url, process)

    async def head(self, url: str) -> Mapping[str, str]:
        """HEAD a URL without following redirects.

        Redirect responses are returned as they are, since mirrors put the
        ``Digest`` header on the redirect itself.

        Returns:
            Response headers

        Raises:
            HTTPStatusError: If the server answers with a 4xx/5xx status
            TransportError: If every attempt failed to complete

        """

        async def process(
            response: aiohttp.ClientResponse,
        ) -> Mapping[str, str]:
            return dict(response.headers)

        return await self._request_with_retry(
            "HEAD", url, process, allow_redirects=False
        )

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        process_callback: Callable[[aiohttp.ClientResponse], Awaitable[T]],
        allow_redirects: bool = True,
    ) -> T:
        """Make HTTP request with retry logic."""
        for attempt in range(1, self.retry_attempts + 1):
            try:
                async with self.session.request(
                    method,
                    url,
                    timeout=self.timeout,
                    allow_redirects=allow_redirects,
                ) as response:
                    if response.status >= 400 or (
                        allow_redirects and response.status >= 300
                    ):
                        msg = f"{method} returned {response.status}"
                        raise HTTPStatusError(response.status, msg, url)
                    return await process_callback(response)

            except (aiohttp.ClientError, TimeoutError) as e:
                logger.warning(
                    "Attempt %s/%s failed for %s: %s",
                    attempt,
                    self.retry_attempts,
                    url,
                    e,
                )

                if attempt == self.retry_attempts:
                    logger.error(
                        "❌ %s %s failed after %s attempts",
                        method,
                        url,
                        self.retry_attempts,
                    )
                    msg = f"{method} failed after {attempt} attempts: {e}"
                    raise TransportError(msg, url) from e

                backoff = 2**attempt
                logger.info("Retrying in %s seconds...", backoff)
                await asyncio.sleep(backoff)

        msg = f"{method} failed"
        raise TransportError(msg, url)
