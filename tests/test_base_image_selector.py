"""Tests for base image selection."""

import logging
from unittest.mock import MagicMock

import pytest

from versioning.errors import DigestUnavailable, NoCompatibleImage, UnknownProductFamily
from versioning.models import ImageFamily, ImageFamilyTable
from versioning.resolvers.base_image import (
    BaseImageSelector,
    coerce_tag_version,
    leading_major,
    translate_tag,
    versions_equivalent,
)

TAHOE = ImageFamily(
    name="tahoe",
    repository="cirruslabs/macos-tahoe-xcode",
    internal_base=26,
    public_base=16,
    known_tags=("26", "26.1", "26.2", "26.3"),
)


def make_selector(tags=("26", "26.1", "26.2", "26.3")):
    """Helper returning a selector over a mocked registry client."""
    registry = MagicMock()
    registry.list_tags.return_value = list(tags) if tags is not None else None
    return BaseImageSelector(ImageFamilyTable.from_entries([TAHOE]), registry), registry


class TestHelpers:
    """Test tag translation helpers."""

    def test_coerce_bare_tag(self):
        """Test bare integer tags gain a minor component."""
        assert coerce_tag_version("26") == "26.0"
        assert coerce_tag_version("26.1") == "26.1"

    def test_translate_tag(self):
        """Test internal numbering maps to public numbering."""
        assert translate_tag("26.2", TAHOE) == "16.2"
        assert translate_tag("26", TAHOE) == "16.0"
        assert translate_tag("27.0.1", TAHOE) == "17.0.1"

    def test_translate_negative_major(self):
        """Test tags below the offset are not translatable."""
        assert translate_tag("5.0", TAHOE) is None

    def test_leading_major(self):
        """Test leading integer extraction."""
        assert leading_major("26.1") == 26
        assert leading_major("16") == 16
        assert leading_major(None) is None
        assert leading_major("latest") is None

    def test_versions_equivalent(self):
        """Test trailing zeros do not matter."""
        assert versions_equivalent("16.2", "16.2.0") is True
        assert versions_equivalent("16.2", "16.3") is False


class TestFindBestImage:
    """Test BaseImageSelector.find_best_image."""

    def test_recommended_in_translated_mode(self):
        """Test [16.0,17.0) with recommendation 16.2 selects tag 26.2."""
        selector, _ = make_selector()

        selected = selector.find_best_image("tahoe", "[16.0,17.0)", "16.2")

        assert selected.tag == "26.2"
        assert selected.comparison_version == "16.2"
        assert selected.is_recommended is True
        assert selected.image == "ghcr.io/cirruslabs/macos-tahoe-xcode:26.2"
        assert selected.digest is None

    def test_direct_mode_when_recommendation_uses_internal_numbering(self):
        """Test a recommendation starting with the internal base compares tags as-is."""
        selector, _ = make_selector()

        selected = selector.find_best_image("tahoe", "[26.0,27.0)", "26.1")

        assert selected.tag == "26.1"
        assert selected.comparison_version == "26.1"

    def test_highest_without_recommendation(self):
        """Test the highest compatible tag wins when nothing is recommended."""
        selector, _ = make_selector()

        selected = selector.find_best_image("tahoe", "[16.0,17.0)")

        assert selected.tag == "26.3"
        assert selected.is_recommended is False

    def test_prefer_highest_overrides_recommendation(self):
        """Test prefer_highest ignores the recommended tag."""
        selector, _ = make_selector()

        selected = selector.find_best_image("tahoe", "[16.0,17.0)", "16.2", prefer_highest=True)

        assert selected.tag == "26.3"

    def test_range_filters_tags(self):
        """Test tags outside the range are excluded."""
        selector, _ = make_selector()

        selected = selector.find_best_image("tahoe", "[16.0,16.2)")

        assert selected.tag == "26.1"

    def test_family_name_is_case_insensitive(self):
        """Test family lookup ignores case."""
        selector, _ = make_selector()

        assert selector.find_best_image("Tahoe", "[16.0,17.0)").tag == "26.3"

    def test_ignores_non_numeric_tags(self):
        """Test tags such as latest are never candidates."""
        selector, _ = make_selector(tags=("latest", "26.1", "26.1-beta"))

        assert selector.find_best_image("tahoe").tag == "26.1"

    def test_numeric_tag_ordering(self):
        """Test 26.10 ranks above 26.9."""
        selector, _ = make_selector(tags=("26.9", "26.10"))

        assert selector.find_best_image("tahoe", "[16.0,17.0)").tag == "26.10"

    def test_no_compatible_image(self):
        """Test NoCompatibleImage when the range excludes every tag."""
        selector, _ = make_selector()

        with pytest.raises(NoCompatibleImage):
            selector.find_best_image("tahoe", "[17.0,18.0)")

    def test_unknown_family(self):
        """Test UnknownProductFamily for an unmapped family."""
        selector, registry = make_selector()

        with pytest.raises(UnknownProductFamily):
            selector.find_best_image("monterey", "[16.0,17.0)")
        registry.list_tags.assert_not_called()

    def test_checks_known_tags_when_listing_fails(self, caplog):
        """Test the family's known tags are checked when listing fails."""
        selector, registry = make_selector(tags=None)
        registry.tag_exists.side_effect = lambda repo, tag: tag in {"26", "26.1"}

        with caplog.at_level(logging.WARNING):
            selected = selector.find_best_image("tahoe", "[16.0,17.0)")

        assert selected.tag == "26.1"
        assert registry.tag_exists.call_count == len(TAHOE.known_tags)
        assert "checking" in caplog.text

    def test_includes_digest(self):
        """Test the digest is attached when requested."""
        selector, registry = make_selector()
        registry.find_digest.return_value = "sha256:abc123"

        selected = selector.find_best_image("tahoe", "[16.0,17.0)", "16.2", include_digest=True)

        assert selected.digest == "sha256:abc123"
        assert selected.image == "ghcr.io/cirruslabs/macos-tahoe-xcode:26.2@sha256:abc123"
        registry.find_digest.assert_called_once_with("cirruslabs/macos-tahoe-xcode", "26.2")

    def test_missing_digest_is_not_fatal(self, caplog):
        """Test selection continues without a digest."""
        selector, registry = make_selector()
        registry.find_digest.side_effect = DigestUnavailable("nope")

        with caplog.at_level(logging.WARNING):
            selected = selector.find_best_image("tahoe", "[16.0,17.0)", "16.2", include_digest=True)

        assert selected.tag == "26.2"
        assert selected.digest is None
        assert "Continuing without digest" in caplog.text

    def test_digest_not_requested(self):
        """Test the registry is not asked for a digest by default."""
        selector, registry = make_selector()

        selector.find_best_image("tahoe", "[16.0,17.0)")

        registry.find_digest.assert_not_called()


class TestDefaultFamilies:
    """Test the configured family table."""

    def test_defaults_include_tahoe(self):
        """Test the default table maps tahoe 26 to 16."""
        selector = BaseImageSelector(registry_client=MagicMock())

        family = selector.families.get("tahoe")

        assert family is not None
        assert family.offset == 10
