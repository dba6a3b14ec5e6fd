"""NPM registry package.

- client.py: latest-version lookups used to pin Appium and its drivers
"""

# Patch point exposed for tests
from common.http_client import get_json  # noqa: F401

from .client import get_latest_version  # noqa: F401

__all__ = [
    "get_latest_version",
    "get_json",
]
