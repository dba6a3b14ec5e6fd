"""Translate between workload set package versions and dotnet CLI versions.

A workload set package ``9.203.0`` is what ``dotnet workload`` calls
``9.0.203``; ``9.203.1`` becomes ``9.0.203.1``.
"""

from __future__ import annotations

import re

_NUMERIC = re.compile(r"^\d+$")


def _split_prerelease(version: str):
    if "-" in version:
        core, pre = version.split("-", 1)
        return core, pre
    return version, None


def to_tool_version(package_version: str) -> str:
    """Convert ``major.band.patch[.extra][-pre]`` to ``major.0.band[.patch][.extra][-pre]``.

    Strings without at least three numeric components are returned as-is.
    """
    core, pre = _split_prerelease(package_version.strip())
    parts = core.split(".")
    if len(parts) < 3 or not all(_NUMERIC.match(p) for p in parts):
        return package_version

    major, band, patch = parts[0], parts[1], parts[2]
    out = [major, "0", band]
    if int(patch) != 0:
        out.append(patch)
    out.extend(parts[3:])
    result = ".".join(out)
    return f"{result}-{pre}" if pre else result


def to_package_version(tool_version: str) -> str:
    """Inverse of :func:`to_tool_version` for ``major.0.band[.patch][-pre]``.

    Anything not in CLI form (minor component other than ``0``) is returned as-is.
    """
    core, pre = _split_prerelease(tool_version.strip())
    parts = core.split(".")
    if len(parts) < 3 or not all(_NUMERIC.match(p) for p in parts) or parts[1] != "0":
        return tool_version

    major, band = parts[0], parts[2]
    patch = parts[3] if len(parts) > 3 else "0"
    out = [major, band, patch] + parts[4:]
    result = ".".join(out)
    return f"{result}-{pre}" if pre else result
