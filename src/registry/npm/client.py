"""NPM registry client: latest published version of a package."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

from constants import Constants
from common.logging_utils import extra_context, safe_url

import registry.npm as npm_pkg

logger = logging.getLogger(__name__)


def get_latest_version(package: str) -> Optional[str]:
    """Return the ``latest`` dist-tag version of ``package``, or None.

    Scoped names (``@scope/name``) keep their ``@`` but have the slash encoded.
    """
    name = quote(package, safe="@")
    url = f"{Constants.REGISTRY_URL_NPM}{name}/latest"
    status, _, data = npm_pkg.get_json(url, headers={"Accept": "application/json"})
    if status == 200 and isinstance(data, dict) and data.get("version"):
        return str(data["version"])

    logger.warning(
        "Could not determine latest npm version",
        extra=extra_context(
            event="http_response",
            component="npm_client",
            action="get_latest_version",
            outcome="not_found" if status == 404 else "unavailable",
            status_code=status,
            target=safe_url(url),
            package_manager="npm"
        )
    )
    return None
