"""Semantic version parsing and preference comparison.

Ordering is: base version numerically, then release over prerelease, then
prerelease rank (``rc*`` > ``preview*`` > anything else), then a plain
lexical comparison of the full prerelease identifier.
"""

from __future__ import annotations

import logging
import re

import semantic_version

from common.logging_utils import extra_context
from .errors import InvalidVersionFormat
from .models import SemanticVersion

logger = logging.getLogger(__name__)

_RANK_RC = 2
_RANK_PREVIEW = 1
_RANK_OTHER = 0

_PRERELEASE = re.compile(r"^[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*$")


def parse_semantic_version(text: str) -> SemanticVersion:
    """Parse ``major.minor.patch[-prerelease]``.

    The base goes through ``semantic_version``; the prerelease identifier is
    kept verbatim, so numeric parts with leading zeros (``preview.07``) are
    accepted. Build metadata (``+...``) is accepted and discarded.

    Raises:
        InvalidVersionFormat: if ``text`` is not a strict three-part version.
    """
    if not isinstance(text, str) or not text.strip():
        raise InvalidVersionFormat(str(text))
    stripped = text.strip().partition("+")[0]
    core, dash, prerelease = stripped.partition("-")
    if dash and not _PRERELEASE.match(prerelease):
        raise InvalidVersionFormat(text, f"Invalid prerelease in version: {text!r}")
    try:
        parsed = semantic_version.Version(core)
    except ValueError as exc:
        raise InvalidVersionFormat(text, f"Invalid version format: {text!r} ({exc})") from exc
    return SemanticVersion((parsed.major, parsed.minor, parsed.patch), prerelease or None)


def prerelease_rank(identifier: str) -> int:
    """Rank a prerelease identifier: rc > preview > other."""
    lowered = identifier.lower()
    if lowered.startswith("rc"):
        return _RANK_RC
    if lowered.startswith("preview"):
        return _RANK_PREVIEW
    return _RANK_OTHER


def compare_semantic(a: SemanticVersion, b: SemanticVersion) -> int:
    """Three-way compare; returns 1, 0 or -1."""
    if a.base_version != b.base_version:
        return 1 if a.base_version > b.base_version else -1

    if a.is_prerelease != b.is_prerelease:
        # A release outranks any prerelease of the same base.
        return -1 if a.is_prerelease else 1
    if not a.is_prerelease:
        return 0

    rank_a, rank_b = prerelease_rank(a.prerelease), prerelease_rank(b.prerelease)
    if rank_a != rank_b:
        return 1 if rank_a > rank_b else -1
    if a.prerelease == b.prerelease:
        return 0
    return 1 if a.prerelease > b.prerelease else -1


def compare_versions(v1: str, v2: str, prefer_first: bool = True) -> bool:
    """Answer "should v1 be preferred over v2".

    With ``prefer_first=False`` the preference is inverted. Identical
    versions yield False either way. A malformed input logs a warning and
    yields False so that one bad record never aborts a batch.
    """
    try:
        p1 = parse_semantic_version(v1)
        p2 = parse_semantic_version(v2)
    except InvalidVersionFormat as exc:
        logger.warning(
            "Cannot compare versions %r and %r: %s",
            v1,
            v2,
            exc,
            extra=extra_context(
                event="parse",
                component="semver",
                action="compare_versions",
                outcome="invalid_version"
            )
        )
        return False

    result = compare_semantic(p1, p2)
    if result == 0:
        return False
    return result > 0 if prefer_first else result < 0
