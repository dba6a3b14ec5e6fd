"""Tests for logging helpers."""

import logging

from common.logging_utils import (
    REDACTED,
    Timer,
    configure_logging,
    extra_context,
    is_debug_enabled,
    redact,
    safe_url,
)


class TestSafeUrl:
    """Test URL redaction."""

    def test_redacts_userinfo(self):
        """Test credentials in the netloc are hidden."""
        assert safe_url("https://user:pw@ghcr.io/v2/") == f"https://{REDACTED}@ghcr.io/v2/"

    def test_redacts_sensitive_query(self):
        """Test token query values are hidden while others remain."""
        url = safe_url("https://ghcr.io/token?scope=repository:a/b:pull&token=secret")

        assert "secret" not in url
        assert "scope=" in url

    def test_plain_url_unchanged(self):
        """Test URLs without secrets pass through."""
        assert safe_url("https://api.nuget.org/v3/index.json") == "https://api.nuget.org/v3/index.json"


class TestRedact:
    """Test free text redaction."""

    def test_bearer_token(self):
        """Test bearer tokens are masked."""
        assert redact("Authorization: Bearer abc.def") == f"Authorization: Bearer {REDACTED}"

    def test_empty(self):
        """Test None becomes an empty string."""
        assert redact(None) == ""


class TestHelpers:
    """Test extra_context, Timer and configure_logging."""

    def test_extra_context_drops_none(self):
        """Test None-valued fields are omitted."""
        assert extra_context(event="x", outcome=None, count=0) == {"event": "x", "count": 0}

    def test_timer(self):
        """Test durations are non-negative integers."""
        with Timer() as t:
            pass

        assert isinstance(t.duration_ms(), int)
        assert t.duration_ms() >= 0

    def test_configure_logging_level(self, monkeypatch):
        """Test explicit level beats the environment and unknown names fall back."""
        root = logging.getLogger()
        original = root.level
        monkeypatch.setenv("MAUIVER_LOG_LEVEL", "ERROR")
        try:
            configure_logging("debug")
            assert root.level == logging.DEBUG
            assert is_debug_enabled(logging.getLogger("versioning.semver"))

            configure_logging()
            assert root.level == logging.ERROR

            configure_logging("nonsense")
            assert root.level == logging.INFO
        finally:
            root.setLevel(original)
