"""Data models for versioning and toolchain resolution."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class SemanticVersion:
    """Parsed ``major.minor.patch[-prerelease]`` version."""
    base_version: Tuple[int, int, int]
    prerelease: Optional[str] = None

    @property
    def is_prerelease(self) -> bool:
        """True when a prerelease identifier is present."""
        return bool(self.prerelease)

    def __str__(self) -> str:
        base = ".".join(str(p) for p in self.base_version)
        return f"{base}-{self.prerelease}" if self.prerelease else base


@dataclass(frozen=True)
class VersionRange:
    """Interval such as ``[16.0,17.0)``; a missing bound is unbounded."""
    min_version: Optional[str]
    min_inclusive: bool
    max_version: Optional[str]
    max_inclusive: bool
    original_text: str

    def __str__(self) -> str:
        return self.original_text


@dataclass(frozen=True)
class WorkloadSetCandidate:
    """One discoverable release of a workload set package."""
    package_id: str
    version: str
    version_band: str  # e.g. "9.0.300", prerelease suffix stripped

    @property
    def band_number(self) -> int:
        """Trailing numeric segment of the band (``300`` for ``9.0.300``)."""
        return int(self.version_band.rsplit(".", 1)[-1])


@dataclass(frozen=True)
class PlainVersionField:
    """A version given as a bare string in a dependency document."""
    value: str


@dataclass(frozen=True)
class StructuredVersionField:
    """A version object with optional ``version`` and ``recommendedVersion``."""
    version: Optional[str] = None
    recommended_version: Optional[str] = None


VersionField = Union[PlainVersionField, StructuredVersionField]


@dataclass(frozen=True)
class AndroidSdkPackage:
    """One entry of the Android SDK package list."""
    id: str
    description: Optional[str] = None
    optional: bool = False
    recommended_id: Optional[str] = None
    recommended_version: Optional[str] = None


@dataclass(frozen=True)
class AndroidDependencyDetails:
    """Android toolchain requirements extracted from a dependency document."""
    workload_version: Optional[str] = None
    jdk_version_range: Optional[str] = None
    jdk_recommended_version: Optional[str] = None
    jdk_major_version: Optional[int] = None
    packages: Tuple[AndroidSdkPackage, ...] = ()
    build_tools_version: Optional[str] = None
    cmdline_tools_version: Optional[str] = None
    api_level: Optional[int] = None
    system_image_type: Optional[str] = None
    system_image_abi: Optional[str] = None
    avd_device_type: Optional[str] = None
    platform: str = "android"


@dataclass(frozen=True)
class AppleDependencyDetails:
    """Xcode/SDK requirements for iOS, tvOS, Mac Catalyst or macOS."""
    platform: str
    workload_version: Optional[str] = None
    xcode_version_range: Optional[str] = None
    xcode_recommended_version: Optional[str] = None
    xcode_major_version: Optional[int] = None
    sdk_version: Optional[str] = None


PlatformDependencyDetails = Union[AndroidDependencyDetails, AppleDependencyDetails]


@dataclass(frozen=True)
class WorkloadManifestRef:
    """A workload manifest pinned by a workload set."""
    manifest_id: str  # e.g. "microsoft.net.sdk.android"
    version: str
    feature_band: str

    @property
    def package_id(self) -> str:
        """NuGet id of the manifest package, e.g. ``Microsoft.NET.Sdk.Android.Manifest-9.0.100``."""
        parts = self.manifest_id.split(".")
        pretty = ".".join(_MANIFEST_SEGMENT_CASE.get(p, p[:1].upper() + p[1:]) for p in parts)
        return f"{pretty}.Manifest-{self.feature_band}"


_MANIFEST_SEGMENT_CASE = {
    "net": "NET",
    "ios": "iOS",
    "tvos": "tvOS",
    "macos": "macOS",
    "maccatalyst": "MacCatalyst",
}


@dataclass(frozen=True)
class WorkloadSetContents:
    """Manifest versions pinned by a workload set."""
    candidate: WorkloadSetCandidate
    manifests: Tuple[WorkloadManifestRef, ...] = ()

    def manifest_for(self, platform: str) -> Optional[WorkloadManifestRef]:
        """Return the manifest for ``platform`` (``android``, ``ios``, ...)."""
        wanted = f"microsoft.net.sdk.{platform.lower()}"
        for ref in self.manifests:
            if ref.manifest_id == wanted:
                return ref
        return None


@dataclass(frozen=True)
class BaseImageCandidate:
    """One tag of a pre-built base image."""
    tag: str
    comparison_version: str
    is_recommended: bool = False
    repository: Optional[str] = None
    digest: Optional[str] = None

    @property
    def image(self) -> str:
        """Reference usable by the VM tooling, digest-pinned when known."""
        ref = f"{self.repository}:{self.tag}" if self.repository else self.tag
        return f"{ref}@{self.digest}" if self.digest else ref

    def with_digest(self, digest: Optional[str]) -> "BaseImageCandidate":
        """Return a copy carrying ``digest``."""
        return replace(self, digest=digest)


@dataclass(frozen=True)
class ImageFamily:
    """Version mapping for one base image family."""
    name: str
    repository: str
    internal_base: int
    public_base: int
    known_tags: Tuple[str, ...] = ()

    @property
    def offset(self) -> int:
        """Difference between internal and public major versions."""
        return self.internal_base - self.public_base


@dataclass(frozen=True)
class ImageFamilyTable:
    """Immutable lookup of image families by lowercase name."""
    families: Mapping[str, ImageFamily] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_entries(cls, entries: Iterable[ImageFamily]) -> "ImageFamilyTable":
        """Build a table from family entries."""
        return cls(MappingProxyType({f.name.lower(): f for f in entries}))

    @classmethod
    def from_config(cls, config: Mapping[str, Mapping[str, Any]]) -> "ImageFamilyTable":
        """Build a table from the ``image_families`` config shape."""
        entries: List[ImageFamily] = []
        for name, raw in config.items():
            entries.append(ImageFamily(
                name=str(name).lower(),
                repository=str(raw["repository"]),
                internal_base=int(raw["internal_base"]),
                public_base=int(raw["public_base"]),
                known_tags=tuple(str(t) for t in raw.get("known_tags", ())),
            ))
        return cls.from_entries(entries)

    def get(self, name: str) -> Optional[ImageFamily]:
        """Return the family called ``name`` or None."""
        return self.families.get(name.lower())

    def names(self) -> List[str]:
        """Sorted family names."""
        return sorted(self.families)
