"""Workload set resolver backed by NuGet search.

Workload sets are published as ``Microsoft.NET.Workloads.<major>.<minor>.<band>``
packages, optionally with a prerelease tag on the id
(``Microsoft.NET.Workloads.10.0.100-rc.1``). Architecture and installer
variants (``....9.0.100.Msi.x64``) are not workload sets and are ignored.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Iterable, List, Optional, Pattern, Tuple

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from registry.nuget.client import search_packages
from ..errors import InvalidVersionFormat, WorkloadSetNotFound
from ..models import WorkloadSetCandidate
from ..semver import compare_versions, parse_semantic_version
from ..translate import to_package_version, to_tool_version

logger = logging.getLogger(__name__)

SearchFn = Callable[..., List[Dict[str, str]]]
FetchFn = Callable[[bool], List[WorkloadSetCandidate]]

_CHANNEL = re.compile(r"^\s*(?:net)?(\d+)(?:\.(\d+))?")


def parse_dotnet_channel(dotnet_version: str) -> Tuple[int, int]:
    """Return ``(major, minor)`` from ``"9.0"``, ``"9"`` or ``"9.0.100"``.

    Raises:
        InvalidVersionFormat: if no leading major version is present.
    """
    match = _CHANNEL.match(str(dotnet_version or ""))
    if not match:
        raise InvalidVersionFormat(str(dotnet_version), f"Invalid .NET version: {dotnet_version!r}")
    return int(match.group(1)), int(match.group(2) or 0)


def workload_set_id_pattern(prefix: str, major: int, minor: int) -> Pattern[str]:
    """Regex matching workload set ids for one channel; group 1 is the band."""
    return re.compile(
        rf"^{re.escape(prefix)}\.{major}\.{minor}\.(\d+)(?:-[A-Za-z0-9]+(?:\.\d+)?)?$",
        re.IGNORECASE,
    )


def build_candidates(
    records: Iterable[Dict[str, str]],
    pattern: Pattern[str],
    major: int,
    minor: int,
    include_prerelease: bool,
) -> List[WorkloadSetCandidate]:
    """Turn search records into candidates, dropping ids that do not match."""
    candidates: List[WorkloadSetCandidate] = []
    for record in records:
        package_id = record.get("id", "")
        version = record.get("version", "")
        match = pattern.match(package_id)
        if not match or not version:
            continue
        if "-" in version and not include_prerelease:
            continue
        try:
            parse_semantic_version(version)
        except InvalidVersionFormat:
            logger.warning("Skipping %s with unparseable version %r", package_id, version)
            continue
        candidates.append(WorkloadSetCandidate(
            package_id=package_id,
            version=version,
            version_band=f"{major}.{minor}.{int(match.group(1))}",
        ))
    return candidates


def choose_prerelease_mode(
    fetch: FetchFn,
    include_prerelease: bool,
    auto_detect: bool,
    exact_version: Optional[str] = None,
) -> bool:
    """Decide whether the search should include prereleases.

    With auto-detection on and no exact version, look for stable
    candidates first and only enable prereleases when none exist. Otherwise the
    caller's ``include_prerelease`` stands.
    """
    if exact_version or not auto_detect:
        return include_prerelease
    if fetch(False):
        return False
    logger.info("No stable workload sets found; including prereleases")
    return True


def _preferred_in_band(candidate: WorkloadSetCandidate, current: WorkloadSetCandidate) -> bool:
    """A release outranks any prerelease in its band; otherwise compare versions."""
    candidate_pre = "-" in candidate.version
    current_pre = "-" in current.version
    if candidate_pre != current_pre:
        return current_pre
    return compare_versions(candidate.version, current.version, True)


def group_by_band(candidates: Iterable[WorkloadSetCandidate]) -> Dict[str, WorkloadSetCandidate]:
    """Keep the single most preferred candidate per version band.

    Within a band a release is kept over a prerelease even when the
    prerelease carries a higher base version (``9.301.1`` over
    ``9.301.2-rc.1``).
    """
    groups: Dict[str, WorkloadSetCandidate] = {}
    for candidate in candidates:
        current = groups.get(candidate.version_band)
        if current is None or _preferred_in_band(candidate, current):
            groups[candidate.version_band] = candidate
    return groups


def select_highest_band(groups: Dict[str, WorkloadSetCandidate]) -> Optional[WorkloadSetCandidate]:
    """Pick the winner whose band is numerically highest."""
    if not groups:
        return None
    return max(groups.values(), key=lambda c: c.band_number)


def select_exact(
    candidates: Iterable[WorkloadSetCandidate], exact_version: str
) -> Optional[WorkloadSetCandidate]:
    """Pick the candidate with ``exact_version``; the highest band wins ties.

    ``exact_version`` may be given as the package version (``9.203.0``) or
    the CLI version (``9.0.203``).
    """
    wanted = exact_version.strip().lower()
    matches = [
        c for c in candidates
        if c.version.lower() == wanted or to_tool_version(c.version).lower() == wanted
    ]
    if not matches:
        return None
    return max(matches, key=lambda c: c.band_number)


class WorkloadSetResolver:
    """Find the workload set to install for a .NET channel."""

    def __init__(self, search: Optional[SearchFn] = None, prefix: Optional[str] = None):
        """Initialize the resolver.

        Args:
            search: Callable ``(query, prerelease=bool) -> [{id, version}]``;
                defaults to NuGet search.
            prefix: Package id prefix (defaults to Constants.WORKLOAD_SET_PREFIX)
        """
        self._search = search
        self.prefix = prefix or Constants.WORKLOAD_SET_PREFIX

    def _run_search(self, query: str, prerelease: bool) -> List[Dict[str, str]]:
        if self._search is not None:
            return self._search(query, prerelease=prerelease)
        return search_packages(query, prerelease=prerelease)

    def find_latest_workload_set(
        self,
        dotnet_version: str,
        exact_version: Optional[str] = None,
        include_prerelease: bool = False,
        auto_detect_prerelease: bool = False,
    ) -> WorkloadSetCandidate:
        """Resolve the workload set for ``dotnet_version`` (e.g. ``"9.0"``).

        Raises:
            InvalidVersionFormat: if ``dotnet_version`` has no major version or
                ``exact_version`` is not a valid version.
            WorkloadSetNotFound: if no candidate survives filtering.
            SearchServiceUnavailable: if both search endpoints fail.
        """
        major, minor = parse_dotnet_channel(dotnet_version)
        if exact_version:
            parse_semantic_version(to_package_version(exact_version.strip()))
        query = f"{self.prefix}.{major}.{minor}"
        pattern = workload_set_id_pattern(self.prefix, major, minor)
        fetched: Dict[bool, List[WorkloadSetCandidate]] = {}

        def fetch(prerelease: bool) -> List[WorkloadSetCandidate]:
            if prerelease not in fetched:
                records = self._run_search(query, prerelease)
                fetched[prerelease] = build_candidates(records, pattern, major, minor, prerelease)
            return fetched[prerelease]

        if exact_version:
            prerelease = include_prerelease or "-" in exact_version
        else:
            prerelease = choose_prerelease_mode(fetch, include_prerelease, auto_detect_prerelease)
        candidates = fetch(prerelease)

        if is_debug_enabled(logger):
            logger.debug(
                "Workload set candidates",
                extra=extra_context(
                    event="decision",
                    component="workload_set_resolver",
                    action="find_latest_workload_set",
                    count=len(candidates),
                    prerelease=prerelease,
                    target=query
                )
            )

        if exact_version:
            selected = select_exact(candidates, exact_version)
            if selected is None:
                raise WorkloadSetNotFound(
                    f"Workload set version {exact_version} not found for .NET {major}.{minor}"
                )
        else:
            selected = select_highest_band(group_by_band(candidates))
            if selected is None:
                raise WorkloadSetNotFound(f"No workload sets found for .NET {major}.{minor}")

        logger.info(
            "Selected workload set %s %s (dotnet %s)",
            selected.package_id,
            selected.version,
            to_tool_version(selected.version),
        )
        return selected
