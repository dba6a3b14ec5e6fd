"""Container registry client for pre-built base images.

Tag enumeration and digest lookup use the GitHub Packages versions API,
where every package version is a content digest carrying zero or more
tags. When that listing is unavailable (no token, rate limit) the OCI
registry itself is queried with anonymous pull tokens.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from versioning.errors import DigestUnavailable

import registry.container as container_pkg

logger = logging.getLogger(__name__)

MANIFEST_ACCEPT = ", ".join([
    "application/vnd.oci.image.index.v1+json",
    "application/vnd.oci.image.manifest.v1+json",
    "application/vnd.docker.distribution.manifest.list.v2+json",
    "application/vnd.docker.distribution.manifest.v2+json",
])


class ContainerRegistryClient:
    """Query tags and digests of ``owner/name`` repositories."""

    def __init__(
        self,
        host: Optional[str] = None,
        api_base: Optional[str] = None,
        token: Optional[str] = None,
    ):
        """Initialize the client.

        Args:
            host: Registry host (defaults to Constants.CONTAINER_REGISTRY_HOST)
            api_base: GitHub API base (defaults to Constants.GITHUB_API_BASE)
            token: GitHub token for the packages API (defaults to GITHUB_TOKEN env var)
        """
        self.host = host or Constants.CONTAINER_REGISTRY_HOST
        self.api_base = (api_base or Constants.GITHUB_API_BASE).rstrip("/")
        self.token = token or os.environ.get(Constants.ENV_GITHUB_TOKEN)

    @staticmethod
    def _split(repository: str) -> Tuple[str, str]:
        owner, _, name = repository.partition("/")
        if not owner or not name:
            raise ValueError(f"Repository must be 'owner/name': {repository!r}")
        return owner, name

    def _api_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _fetch_version_pages(self, base_url: str) -> Optional[List[Dict[str, Any]]]:
        results: List[Dict[str, Any]] = []
        for page in range(1, Constants.REPO_API_MAX_PAGES + 1):
            url = f"{base_url}?per_page={Constants.REPO_API_PER_PAGE}&page={page}"
            status, _, data = container_pkg.get_json(url, headers=self._api_headers())
            if status != 200 or not isinstance(data, list):
                return results if page > 1 else None
            results.extend(d for d in data if isinstance(d, dict))
            if len(data) < Constants.REPO_API_PER_PAGE:
                break
        return results

    def list_versions(self, repository: str) -> Optional[List[Dict[str, Any]]]:
        """List package versions as ``{"digest": ..., "tags": [...]}``.

        Returns:
            The listing, or None when the packages API could not be queried.
        """
        owner, name = self._split(repository)
        encoded = quote(name, safe="")
        raw = None
        for scope in ("orgs", "users"):
            raw = self._fetch_version_pages(
                f"{self.api_base}/{scope}/{owner}/packages/container/{encoded}/versions"
            )
            if raw is not None:
                break
        if raw is None:
            logger.warning(
                "Container package listing unavailable",
                extra=extra_context(
                    event="http_response",
                    component="container_client",
                    action="list_versions",
                    outcome="unavailable",
                    target=repository
                )
            )
            return None

        versions = []
        for item in raw:
            tags = (((item.get("metadata") or {}).get("container") or {}).get("tags")) or []
            versions.append({"digest": item.get("name"), "tags": [str(t) for t in tags]})
        return versions

    def list_tags(self, repository: str) -> Optional[List[str]]:
        """Every tag found in the listing, in listing order; None on failure."""
        versions = self.list_versions(repository)
        if versions is None:
            return None
        tags: List[str] = []
        for version in versions:
            for tag in version["tags"]:
                if tag not in tags:
                    tags.append(tag)
        return tags

    def _pull_token(self, repository: str) -> Optional[str]:
        url = (
            f"https://{self.host}/token?scope=repository:{repository}:pull"
            f"&service={self.host}"
        )
        status, _, data = container_pkg.get_json(url)
        if status == 200 and isinstance(data, dict):
            return data.get("token") or data.get("access_token")
        return None

    def _manifest_head(self, repository: str, tag: str) -> Tuple[int, Dict[str, str]]:
        headers = {"Accept": MANIFEST_ACCEPT}
        token = self._pull_token(repository)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        url = f"https://{self.host}/v2/{repository}/manifests/{tag}"
        status, response_headers = container_pkg.head(url, headers=headers)
        if is_debug_enabled(logger):
            logger.debug(
                "Manifest check",
                extra=extra_context(
                    event="http_response",
                    component="container_client",
                    action="manifest_head",
                    status_code=status,
                    target=safe_url(url)
                )
            )
        return status, response_headers

    def tag_exists(self, repository: str, tag: str) -> bool:
        """True when the registry serves a manifest for ``repository:tag``."""
        status, _ = self._manifest_head(repository, tag)
        return status == 200

    def get_manifest_digest(self, repository: str, tag: str) -> Optional[str]:
        """Read ``Docker-Content-Digest`` from a manifest HEAD."""
        status, headers = self._manifest_head(repository, tag)
        if status != 200:
            return None
        for key, value in headers.items():
            if key.lower() == "docker-content-digest" and value:
                return value
        return None

    def find_digest(self, repository: str, tag: str) -> str:
        """Resolve the content digest of ``repository:tag``.

        Looks in the versions listing first, then inspects the manifest.

        Raises:
            DigestUnavailable: if neither source yields a digest.
        """
        versions = self.list_versions(repository)
        for version in versions or []:
            if tag in version["tags"] and version.get("digest"):
                return str(version["digest"])

        digest = self.get_manifest_digest(repository, tag)
        if digest:
            return digest
        raise DigestUnavailable(f"No digest found for {repository}:{tag}")
