"""Top-level package for manifest-hash.

Checksum resolution and verification for Scoop-style package manifests.

License: GPL-3.0
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("manifest-hash")
except PackageNotFoundError:
    # Fallback for development environments where package isn't installed
    __version__ = "dev"
