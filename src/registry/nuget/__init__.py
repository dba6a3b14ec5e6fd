"""NuGet registry package.

This package provides NuGet support for workload resolution:
- client.py: package search against the primary and fallback search endpoints
- package.py: flat-container download and member extraction from .nupkg archives

Public API is preserved at registry.nuget without shims.
"""

# Patch points exposed for tests (e.g., monkeypatch in tests)
from common.http_client import get_json, download_file  # noqa: F401

# Public API re-exports
from .client import search_packages, build_search_url  # noqa: F401
from .package import package_download_url, read_package_file, read_package_json  # noqa: F401

__all__ = [
    # Client
    "search_packages",
    "build_search_url",
    # Package archives
    "package_download_url",
    "read_package_file",
    "read_package_json",
    # Patch points for tests
    "get_json",
    "download_file",
]
