"""Shared fixtures for network-facing tests."""

import asyncio
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest
import pytest_asyncio
from aioresponses import aioresponses

from manifest_hash.core.fetch import SourceFetcher


@pytest_asyncio.fixture
async def http_session():
    """Real aiohttp session; requests are intercepted by aioresponses."""
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.fixture
def mock_http():
    """Intercept every aiohttp request made during the test."""
    with aioresponses() as m:
        yield m


@pytest.fixture
def mock_sleep():
    """Skip retry backoff delays."""
    with patch.object(asyncio, "sleep", new_callable=AsyncMock) as sleep:
        yield sleep


@pytest.fixture
def fetcher(http_session):
    """Fetcher with the default retry policy."""
    return SourceFetcher(http_session, retry_attempts=3, timeout_seconds=1)
