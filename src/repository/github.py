"""GitHub API client for release information.

Provides a lightweight REST client used to look up the latest tagged
release of the CI runner agents bundled into images.
"""
from __future__ import annotations

import os
from typing import Any, Dict, Optional

from constants import Constants
from common.http_client import get_json


class GitHubClient:
    """Lightweight REST client for GitHub API operations.

    Supports optional authentication via GITHUB_TOKEN environment variable.
    """

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None):
        """Initialize GitHub client.

        Args:
            base_url: Base URL for GitHub API (defaults to Constants.GITHUB_API_BASE)
            token: GitHub personal access token (defaults to GITHUB_TOKEN env var)
        """
        self.base_url = (base_url or Constants.GITHUB_API_BASE).rstrip('/')
        self.token = token or os.environ.get(Constants.ENV_GITHUB_TOKEN)

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers including authorization if token is available."""
        headers = {'Accept': 'application/vnd.github+json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def get_latest_release_info(self, owner: str, repo: str) -> Optional[Dict[str, Any]]:
        """Fetch the latest non-draft, non-prerelease release.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            Dict with tag_name, name, published_at, html_url, or None on error
        """
        url = f"{self.base_url}/repos/{owner}/{repo}/releases/latest"
        status, _, data = get_json(url, headers=self._get_headers())

        if status == 200 and isinstance(data, dict) and data.get('tag_name'):
            return {
                'tag_name': data.get('tag_name'),
                'name': data.get('name'),
                'published_at': data.get('published_at'),
                'html_url': data.get('html_url'),
            }
        return None

    def get_latest_release(self, owner: str, repo: str) -> Optional[str]:
        """Return the latest release version with any leading ``v`` removed.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            Version string such as ``2.328.0``, or None on error
        """
        info = self.get_latest_release_info(owner, repo)
        if not info:
            return None
        tag = str(info['tag_name']).strip()
        if tag[:1] in ('v', 'V'):
            tag = tag[1:]
        return tag
