"""Container registry package.

- client.py: GitHub Packages version listings (tags and digests) and
  direct manifest checks against the OCI registry

Public API is preserved at registry.container without shims.
"""

# Patch points exposed for tests (e.g., monkeypatch in tests)
from common.http_client import get_json, head  # noqa: F401

from .client import ContainerRegistryClient, MANIFEST_ACCEPT  # noqa: F401

__all__ = [
    "ContainerRegistryClient",
    "MANIFEST_ACCEPT",
    "get_json",
    "head",
]
