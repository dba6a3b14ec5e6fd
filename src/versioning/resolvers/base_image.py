"""Select a pre-built macOS base image compatible with an Xcode range.

Image families tag their images in the vendor's internal numbering. For a
family whose internal base is 26 and public base is 16, tag ``26.2`` is
Xcode ``16.2``.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Union

from packaging.version import InvalidVersion, Version

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from registry.container.client import ContainerRegistryClient
from ..errors import DigestUnavailable, NoCompatibleImage, UnknownProductFamily
from ..models import BaseImageCandidate, ImageFamily, ImageFamilyTable, VersionRange
from ..ranges import in_range, parse_version_range

logger = logging.getLogger(__name__)

_NUMERIC_TAG = re.compile(r"^\d+(?:\.\d+)*$")
_LEADING_INT = re.compile(r"^\s*(\d+)")


def leading_major(version: Optional[str]) -> Optional[int]:
    """Leading integer of ``version`` or None."""
    if not version:
        return None
    match = _LEADING_INT.match(str(version))
    return int(match.group(1)) if match else None


def coerce_tag_version(tag: str) -> str:
    """Bare integer tags compare as ``x.0``."""
    return tag if "." in tag else f"{tag}.0"


def translate_tag(tag: str, family: ImageFamily) -> Optional[str]:
    """Map an internal-numbered tag to its public version.

    Returns None when the tag cannot be expressed in public numbering.
    """
    version = coerce_tag_version(tag)
    major, _, rest = version.partition(".")
    public = int(major) - family.offset
    if public < 0:
        return None
    return f"{public}.{rest}"


def versions_equivalent(a: str, b: str) -> bool:
    """Numeric equality that treats ``16.2`` and ``16.2.0`` as equal."""
    try:
        return Version(a) == Version(b)
    except InvalidVersion:
        return a == b


class BaseImageSelector:
    """Pick the best base image tag for a family and version constraint."""

    def __init__(
        self,
        families: Optional[ImageFamilyTable] = None,
        registry_client: Optional[ContainerRegistryClient] = None,
    ):
        """Initialize the selector.

        Args:
            families: Family mapping table (defaults to Constants.IMAGE_FAMILIES)
            registry_client: Client used for tags and digests
        """
        self.families = families or ImageFamilyTable.from_config(Constants.IMAGE_FAMILIES)
        self.registry = registry_client or ContainerRegistryClient()

    def _available_tags(self, family: ImageFamily) -> List[str]:
        tags = self.registry.list_tags(family.repository)
        if tags is None:
            logger.warning(
                "Tag listing failed for %s; checking %d known tags",
                family.repository,
                len(family.known_tags),
            )
            tags = [t for t in family.known_tags if self.registry.tag_exists(family.repository, t)]
        return [t for t in tags if _NUMERIC_TAG.match(t)]

    def _comparison_version(self, tag: str, family: ImageFamily, direct: bool) -> Optional[str]:
        version = coerce_tag_version(tag) if direct else translate_tag(tag, family)
        if version is None:
            return None
        try:
            Version(version)
        except InvalidVersion:
            return None
        return version

    def find_best_image(
        self,
        family: str,
        version_range: Union[str, VersionRange, None] = None,
        recommended_version: Optional[str] = None,
        include_digest: bool = False,
        prefer_highest: bool = False,
    ) -> BaseImageCandidate:
        """Return the selected image tag for ``family``.

        Args:
            family: Image family name (e.g. ``"tahoe"``)
            version_range: Interval string or parsed range; None keeps every tag
            recommended_version: Preferred version, in public or internal numbering
            include_digest: Also resolve the content digest
            prefer_highest: Ignore the recommendation and take the highest tag

        Raises:
            UnknownProductFamily: if ``family`` has no mapping.
            NoCompatibleImage: if no tag satisfies the range.
            ValueError: if the family's repository is not ``owner/name``.
        """
        mapping = self.families.get(family)
        if mapping is None:
            raise UnknownProductFamily(family)

        rng = parse_version_range(version_range) if isinstance(version_range, str) else version_range
        direct = leading_major(recommended_version) == mapping.internal_base

        compatible: List[BaseImageCandidate] = []
        for tag in self._available_tags(mapping):
            comparison = self._comparison_version(tag, mapping, direct)
            if comparison is None or not in_range(comparison, rng):
                continue
            compatible.append(BaseImageCandidate(
                tag=tag,
                comparison_version=comparison,
                is_recommended=bool(recommended_version)
                and versions_equivalent(comparison, str(recommended_version)),
                repository=f"{Constants.CONTAINER_REGISTRY_HOST}/{mapping.repository}",
            ))

        if is_debug_enabled(logger):
            logger.debug(
                "Compatible base images",
                extra=extra_context(
                    event="decision",
                    component="base_image_selector",
                    action="find_best_image",
                    count=len(compatible),
                    mode="direct" if direct else "translated",
                    target=mapping.repository
                )
            )

        if not compatible:
            raise NoCompatibleImage(
                f"No {mapping.name} image satisfies {rng.original_text if rng else 'any range'}"
            )

        selected = None
        if not prefer_highest:
            selected = next((c for c in compatible if c.is_recommended), None)
        if selected is None:
            selected = max(compatible, key=lambda c: Version(c.comparison_version))

        if include_digest:
            try:
                digest = self.registry.find_digest(mapping.repository, selected.tag)
                selected = selected.with_digest(digest)
            except DigestUnavailable as exc:
                logger.warning("Continuing without digest: %s", exc)

        logger.info("Selected base image %s (version %s)", selected.image, selected.comparison_version)
        return selected
