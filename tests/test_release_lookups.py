"""Tests for npm and GitHub latest-version lookups."""

import logging
from unittest.mock import patch

from registry.npm import get_latest_version
from repository.github import GitHubClient


class TestNpmLatest:
    """Test the npm latest-version lookup."""

    @patch("registry.npm.get_json")
    def test_returns_version(self, mock_get_json):
        """Test the version field of the latest document."""
        mock_get_json.return_value = (200, {}, {"name": "appium", "version": "2.11.5"})

        assert get_latest_version("appium") == "2.11.5"
        assert mock_get_json.call_args[0][0].endswith("/appium/latest")

    @patch("registry.npm.get_json")
    def test_scoped_package_url(self, mock_get_json):
        """Test scoped names keep @ and encode the slash."""
        mock_get_json.return_value = (200, {}, {"version": "1.0.0"})

        get_latest_version("@appium/doctor")

        assert mock_get_json.call_args[0][0].endswith("/@appium%2Fdoctor/latest")

    @patch("registry.npm.get_json")
    def test_missing_package(self, mock_get_json, caplog):
        """Test None with a warning for unknown packages."""
        mock_get_json.return_value = (404, {}, None)

        with caplog.at_level(logging.WARNING):
            assert get_latest_version("no-such-package") is None

        assert "Could not determine latest npm version" in caplog.text


class TestGitHubLatestRelease:
    """Test GitHubClient release lookups."""

    @patch("repository.github.get_json")
    def test_latest_release_strips_v(self, mock_get_json):
        """Test the leading v of the tag is removed."""
        mock_get_json.return_value = (200, {}, {
            "tag_name": "v2.328.0",
            "name": "v2.328.0",
            "published_at": "2025-08-13T00:00:00Z",
            "html_url": "https://github.com/actions/runner/releases/tag/v2.328.0",
        })
        client = GitHubClient(token="tok")

        assert client.get_latest_release("actions", "runner") == "2.328.0"
        url = mock_get_json.call_args[0][0]
        assert url.endswith("/repos/actions/runner/releases/latest")
        assert mock_get_json.call_args[1]["headers"]["Authorization"] == "Bearer tok"

    @patch("repository.github.get_json")
    def test_release_info_fields(self, mock_get_json):
        """Test the summary fields returned by get_latest_release_info."""
        mock_get_json.return_value = (200, {}, {"tag_name": "3.0.0", "name": "Three", "extra": 1})

        info = GitHubClient(token=None).get_latest_release_info("o", "r")

        assert info == {"tag_name": "3.0.0", "name": "Three", "published_at": None, "html_url": None}

    @patch("repository.github.get_json")
    def test_no_token_header(self, mock_get_json, monkeypatch):
        """Test no Authorization header without a token."""
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        mock_get_json.return_value = (200, {}, {"tag_name": "1.0"})

        GitHubClient().get_latest_release("o", "r")

        assert "Authorization" not in mock_get_json.call_args[1]["headers"]

    @patch("repository.github.get_json")
    def test_failure_returns_none(self, mock_get_json):
        """Test None on error responses."""
        mock_get_json.return_value = (404, {}, {"message": "Not Found"})

        assert GitHubClient(token="t").get_latest_release("o", "r") is None
