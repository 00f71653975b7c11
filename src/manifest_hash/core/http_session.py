"""HTTP session utilities for manifest-hash.

This module provides utilities for creating configured HTTP sessions
with proper timeout and connection settings.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp

from manifest_hash.constants import (
    DEFAULT_MAX_CONCURRENT_LOOKUPS,
    DEFAULT_TIMEOUT_SECONDS,
)
from manifest_hash.types import Settings


def build_timeout(timeout_seconds: int) -> aiohttp.ClientTimeout:
    """Create the client timeout used for checksum sources.

    Args:
        timeout_seconds: Connect timeout; reads get three times as long

    Returns:
        Configured aiohttp.ClientTimeout

    """
    return aiohttp.ClientTimeout(
        total=timeout_seconds * 6,
        sock_read=timeout_seconds * 3,
        sock_connect=timeout_seconds,
    )


@asynccontextmanager
async def create_http_session(
    settings: Settings,
) -> AsyncIterator[aiohttp.ClientSession]:
    """Create configured HTTP session.

    Args:
        settings: Global settings dictionary

    Yields:
        Configured aiohttp.ClientSession

    """
    network_cfg = settings.get("network", {})
    timeout_seconds = int(
        network_cfg.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
    )
    max_concurrent = settings.get(
        "max_concurrent_lookups", DEFAULT_MAX_CONCURRENT_LOOKUPS
    )

    connector = aiohttp.TCPConnector(
        limit=max_concurrent * 2,
        limit_per_host=max_concurrent,
    )

    async with aiohttp.ClientSession(
        timeout=build_timeout(timeout_seconds),
        connector=connector,
    ) as session:
        yield session
