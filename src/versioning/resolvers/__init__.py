"""Resolvers for workload sets and base images."""

from .workload_set import WorkloadSetResolver, choose_prerelease_mode
from .base_image import BaseImageSelector

__all__ = [
    "WorkloadSetResolver",
    "choose_prerelease_mode",
    "BaseImageSelector",
]
