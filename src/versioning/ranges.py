"""NuGet-style interval ranges: ``[16.0,17.0)``, ``[26.2,)``, ``(,18.0]``.

A comma is always required; single-version forms such as ``[16.0]`` are
rejected. Bounds are compared numerically with ``packaging``.
"""

from __future__ import annotations

import logging
from typing import Optional

from packaging.version import InvalidVersion, Version

from common.logging_utils import extra_context
from .models import VersionRange

logger = logging.getLogger(__name__)


def _warn(text: str, reason: str) -> None:
    logger.warning(
        "Ignoring unparseable version range %r: %s",
        text,
        reason,
        extra=extra_context(
            event="parse",
            component="ranges",
            action="parse_version_range",
            outcome="invalid_range"
        )
    )


def _as_version(text: str) -> Optional[Version]:
    try:
        return Version(text)
    except InvalidVersion:
        return None


def parse_version_range(text: Optional[str]) -> Optional[VersionRange]:
    """Parse interval notation into a VersionRange.

    Returns None for empty input and, after logging a warning, for any
    malformed input, so callers can treat both as "no filtering".
    """
    if text is None or not str(text).strip():
        return None
    raw = str(text).strip()

    if len(raw) < 3 or raw[0] not in "[(" or raw[-1] not in "])":
        _warn(raw, "expected interval brackets")
        return None
    inner = raw[1:-1]
    if inner.count(",") != 1:
        _warn(raw, "expected exactly one comma")
        return None

    low_text, high_text = (part.strip() for part in inner.split(","))
    low = low_text or None
    high = high_text or None

    for bound in (low, high):
        if bound is not None and _as_version(bound) is None:
            _warn(raw, f"bound {bound!r} is not a version")
            return None

    parsed = VersionRange(
        min_version=low,
        min_inclusive=raw[0] == "[",
        max_version=high,
        max_inclusive=raw[-1] == "]",
        original_text=raw,
    )

    if low is not None and high is not None:
        lo, hi = Version(low), Version(high)
        if lo > hi or (lo == hi and not (parsed.min_inclusive and parsed.max_inclusive)):
            _warn(raw, "lower bound exceeds upper bound")
            return None
    return parsed


def in_range(version: str, version_range: Optional[VersionRange]) -> bool:
    """Return True when ``version`` satisfies ``version_range``.

    A missing range, or a missing bound, always satisfies that side.
    """
    if version_range is None:
        return True
    candidate = _as_version(str(version))
    if candidate is None:
        return False

    if version_range.min_version is not None:
        low = Version(version_range.min_version)
        if candidate < low or (candidate == low and not version_range.min_inclusive):
            return False
    if version_range.max_version is not None:
        high = Version(version_range.max_version)
        if candidate > high or (candidate == high and not version_range.max_inclusive):
            return False
    return True
