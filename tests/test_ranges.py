"""Tests for interval range parsing and matching."""

import logging

import pytest

from versioning.ranges import in_range, parse_version_range


class TestParseVersionRange:
    """Test parse_version_range."""

    def test_parses_half_open_range(self):
        """Test inclusive min and exclusive max."""
        rng = parse_version_range("[16.0,17.0)")

        assert rng is not None
        assert rng.min_version == "16.0"
        assert rng.min_inclusive is True
        assert rng.max_version == "17.0"
        assert rng.max_inclusive is False
        assert rng.original_text == "[16.0,17.0)"

    def test_parses_open_upper_bound(self):
        """Test a missing max bound."""
        rng = parse_version_range("[26.2,)")

        assert rng.min_version == "26.2"
        assert rng.max_version is None

    def test_parses_open_lower_bound(self):
        """Test a missing min bound with exclusive bracket."""
        rng = parse_version_range("(,18.0]")

        assert rng.min_version is None
        assert rng.min_inclusive is False
        assert rng.max_version == "18.0"
        assert rng.max_inclusive is True

    def test_tolerates_whitespace(self):
        """Test surrounding and inner whitespace."""
        rng = parse_version_range("  [ 17.0 , 22.0 ) ")

        assert rng.min_version == "17.0"
        assert rng.max_version == "22.0"

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_is_none_without_warning(self, text, caplog):
        """Test empty input yields None silently."""
        with caplog.at_level(logging.WARNING, logger="versioning.ranges"):
            assert parse_version_range(text) is None

        assert caplog.text == ""

    @pytest.mark.parametrize("text", [
        "[16.0]",
        "16.0",
        "{16.0,17.0}",
        "[16.0,17.0,18.0)",
        "[abc,17.0)",
        "[18.0,17.0)",
        "[17.0,17.0)",
    ])
    def test_malformed_returns_none_with_warning(self, text, caplog):
        """Test malformed input is logged and ignored."""
        with caplog.at_level(logging.WARNING, logger="versioning.ranges"):
            assert parse_version_range(text) is None

        assert "Ignoring unparseable version range" in caplog.text


class TestInRange:
    """Test in_range membership."""

    def test_half_open_range(self):
        """Test [16.0,17.0)."""
        rng = parse_version_range("[16.0,17.0)")

        assert in_range("16.9", rng) is True
        assert in_range("16.0", rng) is True
        assert in_range("17.0", rng) is False
        assert in_range("15.9", rng) is False

    def test_open_upper_bound(self):
        """Test [26.2,)."""
        rng = parse_version_range("[26.2,)")

        assert in_range("26.2", rng) is True
        assert in_range("100.0", rng) is True
        assert in_range("26.1", rng) is False

    def test_exclusive_lower_bound(self):
        """Test (16.0,) excludes its minimum."""
        rng = parse_version_range("(16.0,)")

        assert in_range("16.0", rng) is False
        assert in_range("16.0.1", rng) is True

    def test_numeric_not_lexical(self):
        """Test 16.10 sorts above 16.9."""
        rng = parse_version_range("[16.9,17.0)")

        assert in_range("16.10", rng) is True

    def test_no_range_accepts_everything(self):
        """Test None means no filtering."""
        assert in_range("1.0", None) is True

    def test_unparseable_version_is_outside(self):
        """Test garbage versions never match."""
        rng = parse_version_range("[16.0,)")

        assert in_range("latest", rng) is False
