"""Constants and configuration defaults used in the project."""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    NOT_FOUND = 1
    CONNECTION_ERROR = 2
    INVALID_INPUT = 3


class Platforms(Enum):
    """Mobile targets that carry workload dependency documents.

    Args:
        Enum (string): Lowercase platform name used in manifest ids.
    """

    ANDROID = "android"
    IOS = "ios"
    TVOS = "tvos"
    MACCATALYST = "maccatalyst"
    MACOS = "macos"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    # NuGet search is served from two regions; the second is the fallback.
    NUGET_SEARCH_URL = "https://azuresearch-usnc.nuget.org/query"
    NUGET_SEARCH_FALLBACK_URL = "https://azuresearch-ussc.nuget.org/query"
    NUGET_FLAT_CONTAINER_URL = "https://api.nuget.org/v3-flatcontainer/"
    NUGET_SEARCH_TAKE = 100
    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    GITHUB_API_BASE = "https://api.github.com"
    CONTAINER_REGISTRY_HOST = "ghcr.io"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    REPO_API_PER_PAGE = 100
    REPO_API_MAX_PAGES = 10

    WORKLOAD_SET_PREFIX = "Microsoft.NET.Workloads"
    WORKLOAD_SET_FILE = "data/microsoft.net.workloads.workloadset.json"
    WORKLOAD_DEPENDENCIES_FILE = "data/WorkloadDependencies.json"
    MANIFEST_ID_PREFIX = "microsoft.net.sdk."

    DEFAULT_AVD_DEVICE = "pixel_5"
    DEFAULT_HOST_RID = "linux-x64"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "MAUIVER_LOG_LEVEL"
    ENV_CONFIG = "MAUIVER_CONFIG"
    CONFIG_FILENAMES = (
        "maui-image-versions.yml",
        "maui-image-versions.yaml",
        os.path.join("~", ".config", "maui-image-versions", "config.yml"),
    )
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests

    # Xcode base images published by Cirrus Labs. Tags use the vendor's
    # internal numbering (26.x) for the Xcode 16 line.
    IMAGE_FAMILIES: Dict[str, Dict[str, Any]] = {
        "tahoe": {
            "repository": "cirruslabs/macos-tahoe-xcode",
            "internal_base": 26,
            "public_base": 16,
            "known_tags": ["26", "26.0", "26.0.1", "26.1", "26.2", "26.3"],
        },
        "sequoia": {
            "repository": "cirruslabs/macos-sequoia-xcode",
            "internal_base": 16,
            "public_base": 16,
            "known_tags": ["16", "16.0", "16.1", "16.2", "16.3", "16.4"],
        },
    }


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML configuration file.

    Looks at ``path``, then ``MAUIVER_CONFIG``, then the default locations.
    Returns an empty dict when no file is found or it cannot be parsed.
    """
    candidates = []
    if path:
        candidates.append(path)
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        candidates.append(env_path)
    candidates.extend(Constants.CONFIG_FILENAMES)

    for candidate in candidates:
        full = os.path.expanduser(candidate)
        if not os.path.isfile(full):
            continue
        try:
            with open(full, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Failed to load config %s: %s", full, exc)
            return {}
        if isinstance(data, dict):
            logger.debug("Loaded config from %s", full)
            return data
        logger.warning("Ignoring config %s: top level is not a mapping", full)
        return {}
    return {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Overlay a loaded config mapping onto Constants.

    Recognized sections: ``registries``, ``http``, ``android`` and
    ``image_families``. Unknown keys are ignored.
    """
    if not isinstance(cfg, dict):
        return

    registries = cfg.get("registries") or {}
    if isinstance(registries, dict):
        mapping = {
            "nuget_search": "NUGET_SEARCH_URL",
            "nuget_search_fallback": "NUGET_SEARCH_FALLBACK_URL",
            "nuget_flat_container": "NUGET_FLAT_CONTAINER_URL",
            "npm": "REGISTRY_URL_NPM",
            "github_api": "GITHUB_API_BASE",
            "container_registry": "CONTAINER_REGISTRY_HOST",
        }
        for key, attr in mapping.items():
            value = registries.get(key)
            if isinstance(value, str) and value.strip():
                setattr(Constants, attr, value.strip())

    http = cfg.get("http") or {}
    if isinstance(http, dict) and http.get("timeout") is not None:
        try:
            Constants.REQUEST_TIMEOUT = int(http["timeout"])
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid http.timeout: %r", http.get("timeout"))

    android = cfg.get("android") or {}
    if isinstance(android, dict):
        if android.get("avd_device"):
            Constants.DEFAULT_AVD_DEVICE = str(android["avd_device"])
        if android.get("host_rid"):
            Constants.DEFAULT_HOST_RID = str(android["host_rid"])

    families = cfg.get("image_families")
    if isinstance(families, dict) and families:
        merged = dict(Constants.IMAGE_FAMILIES)
        for name, entry in families.items():
            problem = _image_family_problem(entry)
            if problem:
                logger.warning("Ignoring image family %r: %s", name, problem)
                continue
            merged[str(name).lower()] = entry
        Constants.IMAGE_FAMILIES = merged


def _image_family_problem(entry: Any) -> Optional[str]:
    """Describe what makes an ``image_families`` entry unusable, or None."""
    if not isinstance(entry, dict):
        return "entry is not a mapping"
    repository = entry.get("repository")
    owner, _, name = str(repository or "").partition("/")
    if not isinstance(repository, str) or not owner or not name:
        return "repository must be 'owner/name'"
    for key in ("internal_base", "public_base"):
        value = entry.get(key)
        if isinstance(value, bool):
            return f"{key} must be an integer"
        try:
            int(value)
        except (TypeError, ValueError):
            return f"{key} must be an integer"
    if not isinstance(entry.get("known_tags", []), list):
        return "known_tags must be a list"
    return None
