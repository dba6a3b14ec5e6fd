"""NuGet search client: query the primary search endpoint with a single fallback."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from versioning.errors import SearchServiceUnavailable

import registry.nuget as nuget_pkg

logger = logging.getLogger(__name__)

HEADERS_JSON = {"Accept": "application/json"}


def build_search_url(base_url: str, query: str, prerelease: bool, take: Optional[int] = None) -> str:
    """Build a search URL for ``query``."""
    params = {
        "q": query,
        "prerelease": "true" if prerelease else "false",
        "semVerLevel": "2.0.0",
        "take": str(take or Constants.NUGET_SEARCH_TAKE),
    }
    return f"{base_url}?{urlencode(params)}"


def _flatten(data: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Expand search entries into ``{id, version}`` records.

    Entries carrying a ``versions`` list contribute one record per listed
    version; otherwise the entry's own ``version`` is used.
    """
    records: List[Dict[str, str]] = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        package_id = entry.get("id")
        if not package_id:
            continue
        versions = entry.get("versions")
        if isinstance(versions, list) and versions:
            for item in versions:
                version = item.get("version") if isinstance(item, dict) else item
                if version:
                    records.append({"id": package_id, "version": str(version)})
        elif entry.get("version"):
            records.append({"id": package_id, "version": str(entry["version"])})
    return records


def _query(base_url: str, query: str, prerelease: bool) -> Optional[List[Dict[str, Any]]]:
    """Run one search request; None when the endpoint did not answer usefully."""
    url = build_search_url(base_url, query, prerelease)
    with Timer() as timer:
        status, _, payload = nuget_pkg.get_json(url, headers=HEADERS_JSON)
    if status != 200 or not isinstance(payload, dict):
        logger.warning(
            "NuGet search endpoint failed",
            extra=extra_context(
                event="http_response",
                component="nuget_client",
                action="search",
                outcome="unavailable",
                status_code=status,
                duration_ms=timer.duration_ms(),
                target=safe_url(url)
            )
        )
        return None
    data = payload.get("data")
    return data if isinstance(data, list) else []


def search_packages(query: str, *, prerelease: bool) -> List[Dict[str, str]]:
    """Search NuGet for ``query``.

    Tries ``Constants.NUGET_SEARCH_URL`` once, then
    ``Constants.NUGET_SEARCH_FALLBACK_URL`` once.

    Returns:
        List of ``{"id": ..., "version": ...}`` records.

    Raises:
        SearchServiceUnavailable: if neither endpoint answered.
    """
    for base_url in (Constants.NUGET_SEARCH_URL, Constants.NUGET_SEARCH_FALLBACK_URL):
        data = _query(base_url, query, prerelease)
        if data is None:
            continue
        records = _flatten(data)
        if is_debug_enabled(logger):
            logger.debug(
                "NuGet search results",
                extra=extra_context(
                    event="search",
                    component="nuget_client",
                    action="search",
                    outcome="success",
                    count=len(records),
                    target=query
                )
            )
        return records

    raise SearchServiceUnavailable(
        f"NuGet search unavailable for {query!r} (primary and fallback endpoints failed)"
    )
