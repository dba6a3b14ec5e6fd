"""Tests for package/CLI version translation."""

import pytest

from versioning.translate import to_package_version, to_tool_version


class TestToToolVersion:
    """Test to_tool_version."""

    @pytest.mark.parametrize("package_version,expected", [
        ("9.203.0", "9.0.203"),
        ("9.100.0", "9.0.100"),
        ("9.203.1", "9.0.203.1"),
        ("10.100.0-rc.1.25458.2", "10.0.100-rc.1.25458.2"),
        ("9.300.2.4", "9.0.300.2.4"),
    ])
    def test_translates(self, package_version, expected):
        """Test the band moves to the third segment."""
        assert to_tool_version(package_version) == expected

    @pytest.mark.parametrize("value", ["9.0", "9", "latest", "9.x.1", ""])
    def test_passes_through_when_not_translatable(self, value):
        """Test inputs without three numeric parts are returned unchanged."""
        assert to_tool_version(value) == value


class TestToPackageVersion:
    """Test to_package_version."""

    def test_inverts_tool_version(self):
        """Test CLI form maps back to package form."""
        assert to_package_version("9.0.203") == "9.203.0"
        assert to_package_version("9.0.203.1") == "9.203.1"
        assert to_package_version("10.0.100-rc.1.25458.2") == "10.100.0-rc.1.25458.2"

    def test_leaves_package_versions_alone(self):
        """Test strings already in package form are unchanged."""
        assert to_package_version("9.203.0") == "9.203.0"
