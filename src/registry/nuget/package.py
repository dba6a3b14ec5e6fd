"""Download .nupkg archives and read individual members.

Archives land in a fresh temporary directory that is removed on every
exit path, so repeated runs on a long-lived runner leave nothing behind.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import zipfile
from typing import Any, Optional

from constants import Constants
from common.logging_utils import extra_context

import registry.nuget as nuget_pkg

logger = logging.getLogger(__name__)


def package_download_url(package_id: str, version: str) -> str:
    """Flat-container URL of the ``.nupkg`` for ``package_id`` at ``version``."""
    pid = package_id.lower()
    ver = version.lower()
    return f"{Constants.NUGET_FLAT_CONTAINER_URL}{pid}/{ver}/{pid}.{ver}.nupkg"


def _read_member(archive_path: str, member: str) -> Optional[bytes]:
    wanted = member.replace("\\", "/").lower()
    try:
        with zipfile.ZipFile(archive_path) as archive:
            for name in archive.namelist():
                if name.replace("\\", "/").lower() == wanted:
                    return archive.read(name)
    except zipfile.BadZipFile:
        logger.warning("Downloaded package is not a valid archive: %s", archive_path)
    return None


def read_package_file(package_id: str, version: str, member: str) -> Optional[bytes]:
    """Return the bytes of ``member`` inside the package, or None.

    None covers both a failed download and a missing member; the cause is
    logged.
    """
    url = package_download_url(package_id, version)
    with tempfile.TemporaryDirectory(prefix="mauiver-nupkg-") as workdir:
        archive_path = os.path.join(workdir, f"{package_id.lower()}.{version.lower()}.nupkg")
        if not nuget_pkg.download_file(url, archive_path):
            return None
        content = _read_member(archive_path, member)
    if content is None:
        logger.warning(
            "Package member not found",
            extra=extra_context(
                event="extract",
                component="nuget_package",
                action="read_package_file",
                outcome="missing_member",
                target=f"{package_id}/{version}:{member}"
            )
        )
    return content


def read_package_json(package_id: str, version: str, member: str) -> Optional[Any]:
    """Like :func:`read_package_file` but decodes the member as JSON."""
    content = read_package_file(package_id, version, member)
    if content is None:
        return None
    try:
        return json.loads(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Could not parse %s from %s %s: %s", member, package_id, version, exc)
        return None
