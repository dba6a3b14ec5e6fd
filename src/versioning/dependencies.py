"""Extract per-platform toolchain requirements from WorkloadDependencies.json.

Documents are keyed by manifest id (``microsoft.net.sdk.android``). Version
fields appear either as a bare string or as an object with ``version`` and
``recommendedVersion``; both are loaded into a VersionField up front.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterator, List, Mapping, Match, Optional, Pattern

from constants import Constants, Platforms
from common.logging_utils import extra_context, is_debug_enabled
from .models import (
    AndroidDependencyDetails,
    AndroidSdkPackage,
    AppleDependencyDetails,
    PlainVersionField,
    PlatformDependencyDetails,
    StructuredVersionField,
    VersionField,
)

logger = logging.getLogger(__name__)

APPLE_PLATFORMS = {
    Platforms.IOS.value,
    Platforms.TVOS.value,
    Platforms.MACCATALYST.value,
    Platforms.MACOS.value,
}

_LEADING_INT = re.compile(r"^\s*(\d+)")
_BUILD_TOOLS = re.compile(r"^build-tools;(.+)$")
_CMDLINE_TOOLS = re.compile(r"^cmdline-tools;(.+)$")
_PLATFORM = re.compile(r"^platforms;android-(\d+)$")
_SYSTEM_IMAGE = re.compile(r"^system-images;android-(\d+);([^;]+);([^;]+)$")


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def load_version_field(raw: Any) -> Optional[VersionField]:
    """Load a bare string or a version object into a VersionField."""
    if isinstance(raw, Mapping):
        return StructuredVersionField(
            version=_text(raw.get("version")),
            recommended_version=_text(raw.get("recommendedVersion")),
        )
    text = _text(raw)
    return PlainVersionField(text) if text else None


def field_range(field: Optional[VersionField]) -> Optional[str]:
    """Range text of a field; a bare string carries no range."""
    if isinstance(field, StructuredVersionField):
        return field.version
    return None


def field_recommended(field: Optional[VersionField]) -> Optional[str]:
    """Recommended version; a bare string recommends itself."""
    if isinstance(field, PlainVersionField):
        return field.value
    if isinstance(field, StructuredVersionField):
        return field.recommended_version
    return None


def field_value(field: Optional[VersionField]) -> Optional[str]:
    """Plain value of a field that holds a single version (e.g. ``sdk``)."""
    if isinstance(field, PlainVersionField):
        return field.value
    if isinstance(field, StructuredVersionField):
        return field.version or field.recommended_version
    return None


def leading_int(version: Optional[str]) -> Optional[int]:
    """Leading integer of ``version`` (``17`` for ``17.0.12``)."""
    if not version:
        return None
    match = _LEADING_INT.match(version)
    return int(match.group(1)) if match else None


def _host_value(value: Any, host_rid: str) -> Optional[str]:
    """Resolve a per-host map (``{"linux-x64": ...}``) or pass a string through."""
    if isinstance(value, Mapping):
        chosen = value.get(host_rid)
        if chosen is None and value:
            chosen = next(iter(value.values()))
        return _text(chosen)
    return _text(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _load_sdk_packages(androidsdk: Any, host_rid: str) -> List[AndroidSdkPackage]:
    if not isinstance(androidsdk, Mapping):
        return []
    entries = androidsdk.get("packages")
    if not isinstance(entries, list):
        return []

    packages: List[AndroidSdkPackage] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            logger.debug("Skipping malformed SDK package entry: %r", entry)
            continue
        sdk_package = entry.get("sdkPackage")
        if isinstance(sdk_package, Mapping):
            package_id = _host_value(sdk_package.get("id"), host_rid)
            recommended_id = _host_value(sdk_package.get("recommendedId"), host_rid)
        else:
            package_id = _host_value(sdk_package, host_rid)
            recommended_id = None
        if not package_id:
            logger.debug("Skipping SDK package without id: %r", entry)
            continue

        recommended_version = _text(entry.get("recommendedVersion"))
        if recommended_version is None and recommended_id and ";" in recommended_id:
            recommended_version = recommended_id.rsplit(";", 1)[1]

        packages.append(AndroidSdkPackage(
            id=package_id,
            description=_text(entry.get("desc")),
            optional=_as_bool(entry.get("optional", False)),
            recommended_id=recommended_id,
            recommended_version=recommended_version,
        ))
    return packages


def _package_ids(packages: List[AndroidSdkPackage]) -> Iterator[str]:
    for package in packages:
        yield package.id
        if package.recommended_id and package.recommended_id != package.id:
            yield package.recommended_id


def _first_match(packages: List[AndroidSdkPackage], pattern: Pattern[str]) -> Optional[Match[str]]:
    for package_id in _package_ids(packages):
        match = pattern.match(package_id)
        if match:
            return match
    return None


def _workload_version(section: Mapping[str, Any]) -> Optional[str]:
    workload = section.get("workload")
    if isinstance(workload, Mapping):
        return _text(workload.get("version"))
    return None


def _extract_android(
    section: Mapping[str, Any], host_rid: str, avd_device: str
) -> AndroidDependencyDetails:
    jdk = load_version_field(section.get("jdk"))
    jdk_recommended = field_recommended(jdk)
    packages = _load_sdk_packages(section.get("androidsdk"), host_rid)

    build_tools = _first_match(packages, _BUILD_TOOLS)
    cmdline_tools = _first_match(packages, _CMDLINE_TOOLS)
    platform = _first_match(packages, _PLATFORM)
    # First listed system image wins.
    system_image = _first_match(packages, _SYSTEM_IMAGE)

    return AndroidDependencyDetails(
        workload_version=_workload_version(section),
        jdk_version_range=field_range(jdk),
        jdk_recommended_version=jdk_recommended,
        jdk_major_version=leading_int(jdk_recommended),
        packages=tuple(packages),
        build_tools_version=build_tools.group(1) if build_tools else None,
        cmdline_tools_version=cmdline_tools.group(1) if cmdline_tools else None,
        api_level=int(platform.group(1)) if platform else None,
        system_image_type=system_image.group(2) if system_image else None,
        system_image_abi=system_image.group(3) if system_image else None,
        avd_device_type=avd_device,
    )


def _extract_apple(section: Mapping[str, Any], platform: str) -> AppleDependencyDetails:
    xcode = load_version_field(section.get("xcode"))
    recommended = field_recommended(xcode)
    return AppleDependencyDetails(
        platform=platform,
        workload_version=_workload_version(section),
        xcode_version_range=field_range(xcode),
        xcode_recommended_version=recommended,
        xcode_major_version=leading_int(recommended),
        sdk_version=field_value(load_version_field(section.get("sdk"))),
    )


def _find_section(document: Mapping[str, Any], platform: str) -> Optional[Mapping[str, Any]]:
    wanted = f"{Constants.MANIFEST_ID_PREFIX}{platform}"
    for key, value in document.items():
        if str(key).lower() == wanted and isinstance(value, Mapping):
            return value
    return None


def extract_platform_details(
    document: Any,
    platform: str,
    *,
    host_rid: Optional[str] = None,
    avd_device: Optional[str] = None,
) -> Optional[PlatformDependencyDetails]:
    """Extract requirements for ``platform`` from a dependency document.

    Args:
        document: Parsed WorkloadDependencies.json
        platform: ``android``, ``ios``, ``tvos``, ``maccatalyst`` or ``macos``
        host_rid: Runtime identifier used to pick per-host package ids
        avd_device: Virtual device profile to report for Android

    Returns:
        Details for the platform, or None when the document has no section for it.

    Raises:
        ValueError: if ``platform`` is not a supported target.
    """
    name = platform.lower()
    if name != Platforms.ANDROID.value and name not in APPLE_PLATFORMS:
        raise ValueError(f"Unsupported platform: {platform!r}")
    if not isinstance(document, Mapping):
        return None

    section = _find_section(document, name)
    if section is None:
        if is_debug_enabled(logger):
            logger.debug(
                "No dependency section for platform",
                extra=extra_context(
                    event="decision",
                    component="dependencies",
                    action="extract_platform_details",
                    outcome="missing_section",
                    target=name
                )
            )
        return None

    if name == Platforms.ANDROID.value:
        return _extract_android(
            section,
            host_rid or Constants.DEFAULT_HOST_RID,
            avd_device or Constants.DEFAULT_AVD_DEVICE,
        )
    return _extract_apple(section, name)
