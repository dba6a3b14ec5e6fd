"""Resolution service chaining workload set, dependency and base image lookups.

Every leg is independent: a failure after the workload set is found is
recorded on the result and the remaining legs still run. Failing to find a
workload set at all is raised to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from constants import Platforms
from .dependencies import extract_platform_details
from .errors import NoCompatibleImage, UnknownProductFamily
from .models import (
    AndroidDependencyDetails,
    AppleDependencyDetails,
    BaseImageCandidate,
    WorkloadSetCandidate,
    WorkloadSetContents,
)
from .resolvers.base_image import BaseImageSelector
from .resolvers.workload_set import WorkloadSetResolver
from .translate import to_tool_version
from .workload_contents import WorkloadSetContentsReader

logger = logging.getLogger(__name__)


@dataclass
class ToolchainResolution:
    """Outcome of one resolution run."""
    dotnet_version: str
    workload_set: WorkloadSetCandidate
    contents: Optional[WorkloadSetContents] = None
    android: Optional[AndroidDependencyDetails] = None
    apple: Dict[str, AppleDependencyDetails] = field(default_factory=dict)
    base_image: Optional[BaseImageCandidate] = None
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Flat mapping consumed by the image build scripts."""
        out: Dict[str, Any] = {
            "DOTNET_VERSION": self.dotnet_version,
            "DOTNET_SDK_VERSION": to_tool_version(self.workload_set.version),
            "WORKLOAD_SET_ID": self.workload_set.package_id,
            "WORKLOAD_SET_VERSION": self.workload_set.version,
            "WORKLOAD_SET_BAND": self.workload_set.version_band,
        }
        if self.contents is not None:
            out["WORKLOAD_MANIFESTS"] = {
                ref.manifest_id: ref.version for ref in self.contents.manifests
            }
        if self.android is not None:
            a = self.android
            out.update({
                "ANDROID_WORKLOAD_VERSION": a.workload_version,
                "JDK_VERSION_RANGE": a.jdk_version_range,
                "JDK_RECOMMENDED_VERSION": a.jdk_recommended_version,
                "JDK_MAJOR_VERSION": a.jdk_major_version,
                "ANDROID_SDK_API_LEVEL": a.api_level,
                "ANDROID_SDK_BUILD_TOOLS_VERSION": a.build_tools_version,
                "ANDROID_SDK_CMDLINE_TOOLS_VERSION": a.cmdline_tools_version,
                "ANDROID_AVD_SYSTEM_IMAGE_TYPE": a.system_image_type,
                "ANDROID_AVD_ABI": a.system_image_abi,
                "ANDROID_AVD_DEVICE_TYPE": a.avd_device_type,
                "ANDROID_SDK_PACKAGES": [p.id for p in a.packages if not p.optional],
            })
        ios = self.apple.get(Platforms.IOS.value)
        if ios is not None:
            out.update({
                "IOS_WORKLOAD_VERSION": ios.workload_version,
                "XCODE_VERSION_RANGE": ios.xcode_version_range,
                "XCODE_VERSION": ios.xcode_recommended_version,
                "XCODE_MAJOR_VERSION": ios.xcode_major_version,
                "IOS_SDK_VERSION": ios.sdk_version,
            })
        if self.base_image is not None:
            out.update({
                "BASE_IMAGE": self.base_image.image,
                "BASE_IMAGE_TAG": self.base_image.tag,
                "BASE_IMAGE_DIGEST": self.base_image.digest,
            })
        out["ERRORS"] = list(self.errors)
        return out


class ToolchainResolutionService:
    """Run the resolution legs in order for one .NET channel."""

    def __init__(
        self,
        workload_resolver: Optional[WorkloadSetResolver] = None,
        contents_reader: Optional[WorkloadSetContentsReader] = None,
        image_selector: Optional[BaseImageSelector] = None,
    ):
        self.workload_resolver = workload_resolver or WorkloadSetResolver()
        self.contents_reader = contents_reader or WorkloadSetContentsReader()
        self._image_selector = image_selector

    @property
    def image_selector(self) -> BaseImageSelector:
        """Selector, created on first use so tag lookups stay optional."""
        if self._image_selector is None:
            self._image_selector = BaseImageSelector()
        return self._image_selector

    def resolve(
        self,
        dotnet_version: str,
        exact_version: Optional[str] = None,
        include_prerelease: bool = False,
        auto_detect_prerelease: bool = True,
        platforms: Sequence[str] = (Platforms.ANDROID.value, Platforms.IOS.value),
        image_family: Optional[str] = None,
        include_digest: bool = False,
        prefer_highest: bool = False,
    ) -> ToolchainResolution:
        """Resolve a workload set and enrich it.

        Raises:
            WorkloadSetNotFound, SearchServiceUnavailable, InvalidVersionFormat:
                from the workload set leg.
        """
        candidate = self.workload_resolver.find_latest_workload_set(
            dotnet_version,
            exact_version=exact_version,
            include_prerelease=include_prerelease,
            auto_detect_prerelease=auto_detect_prerelease,
        )
        result = ToolchainResolution(dotnet_version=dotnet_version, workload_set=candidate)

        result.contents = self.contents_reader.read(candidate)
        if result.contents is None:
            result.errors.append(f"Could not read workload set {candidate.package_id} {candidate.version}")
        else:
            for platform in platforms:
                self._resolve_platform(result, platform.lower())

        if image_family:
            self._resolve_image(result, image_family, include_digest, prefer_highest)
        return result

    def _resolve_platform(self, result: ToolchainResolution, platform: str) -> None:
        ref = result.contents.manifest_for(platform) if result.contents else None
        if ref is None:
            result.errors.append(f"Workload set pins no {platform} manifest")
            return
        document = self.contents_reader.fetch_dependency_document(ref)
        details = extract_platform_details(document, platform)
        if details is None:
            result.errors.append(f"No {platform} dependency details in {ref.package_id} {ref.version}")
        elif isinstance(details, AndroidDependencyDetails):
            result.android = details
        else:
            result.apple[platform] = details

    def _resolve_image(
        self,
        result: ToolchainResolution,
        image_family: str,
        include_digest: bool,
        prefer_highest: bool,
    ) -> None:
        ios = result.apple.get(Platforms.IOS.value)
        if ios is None:
            logger.warning("Selecting %s base image without Xcode constraints", image_family)
            result.errors.append(
                f"Unconstrained base image: no {Platforms.IOS.value} Xcode details to select {image_family} by"
            )
        try:
            result.base_image = self.image_selector.find_best_image(
                image_family,
                version_range=ios.xcode_version_range if ios else None,
                recommended_version=ios.xcode_recommended_version if ios else None,
                include_digest=include_digest,
                prefer_highest=prefer_highest,
            )
        except (NoCompatibleImage, UnknownProductFamily, ValueError) as exc:
            logger.error("Base image selection failed: %s", exc)
            result.errors.append(str(exc))
