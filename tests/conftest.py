"""Pytest configuration and fixtures for manifest-hash tests."""

import logging
import os
import tempfile
from pathlib import Path

import orjson
import pytest

# Keep logs and settings out of the user's home directory. This must run
# before any manifest_hash module creates its logger.
_TEST_HOME = Path(tempfile.mkdtemp(prefix="manifest-hash-tests-"))
os.environ.setdefault("MANIFEST_HASH_LOG_DIR", str(_TEST_HOME / "logs"))
os.environ.setdefault("MANIFEST_HASH_CONFIG_DIR", str(_TEST_HOME / "config"))

from manifest_hash.domain.manifest import Architecture  # noqa: E402

SHA256_HEX = "a" * 64
DOWNLOAD_URL = "https://example.com/releases/tool-1.2.3-x64.zip"


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Enable log propagation for all loggers during tests.

    This allows pytest's caplog fixture to capture logs from all loggers,
    even those created with propagate=False in production code.
    """
    original_propagation = {}
    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name.startswith("manifest_hash"):
            logger = logging.getLogger(name)
            original_propagation[name] = logger.propagate
            logger.propagate = True

    yield

    for name, propagate_value in original_propagation.items():
        logger = logging.getLogger(name)
        logger.propagate = propagate_value


@pytest.fixture
def arch():
    """Fixed target architecture so tests do not depend on the host."""
    return Architecture.X64


@pytest.fixture
def manifest_data():
    """Minimal manifest with an autoupdate section using a regex."""
    return {
        "version": "1.2.3",
        "description": "Example tool",
        "homepage": "https://example.com",
        "license": "MIT",
        "url": DOWNLOAD_URL,
        "hash": SHA256_HEX,
        "bin": "tool.exe",
        "autoupdate": {
            "url": "https://example.com/releases/tool-$version-x64.zip",
            "hash": {
                "url": "$baseurl/SHA256SUMS",
                "regex": "$sha256\\s+$basename",
            },
        },
    }


@pytest.fixture
def write_manifest():
    """Write a manifest dictionary to ``<directory>/<name>.json``."""

    def _write(directory: Path, name: str, data: dict) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{name}.json"
        path.write_bytes(orjson.dumps(data))
        return path

    return _write
