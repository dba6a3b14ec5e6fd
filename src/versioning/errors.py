"""Typed failures raised by the resolution core."""


class ResolutionError(Exception):
    """Base class for all resolution failures."""


class InvalidVersionFormat(ResolutionError, ValueError):
    """A version string does not match ``major.minor.patch[-prerelease]``."""

    def __init__(self, version: str, message: str = ""):
        self.version = version
        super().__init__(message or f"Invalid version format: {version!r}")


class WorkloadSetNotFound(ResolutionError):
    """No workload set candidate survived filtering."""


class SearchServiceUnavailable(ResolutionError):
    """Both the primary and the fallback search endpoints failed."""


class UnknownProductFamily(ResolutionError):
    """The requested base image family has no version mapping."""

    def __init__(self, family: str):
        self.family = family
        super().__init__(f"Unknown base image family: {family!r}")


class NoCompatibleImage(ResolutionError):
    """No base image tag satisfied the version range."""


class DigestUnavailable(ResolutionError):
    """The content digest for an image tag could not be determined."""
