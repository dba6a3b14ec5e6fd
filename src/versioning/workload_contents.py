"""Read workload set packages and the dependency documents they point at."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from constants import Constants
from registry.nuget.package import read_package_json
from .models import WorkloadManifestRef, WorkloadSetCandidate, WorkloadSetContents

logger = logging.getLogger(__name__)


def parse_workload_set_json(document: Any, default_band: str) -> List[WorkloadManifestRef]:
    """Parse ``{"microsoft.net.sdk.android": "35.0.7/9.0.100", ...}``.

    Entries without a ``/band`` suffix use ``default_band``. Non-string
    values are skipped.
    """
    if not isinstance(document, Mapping):
        return []
    refs: List[WorkloadManifestRef] = []
    for manifest_id, value in document.items():
        if not isinstance(value, str) or not value.strip():
            logger.debug("Skipping workload set entry %r: %r", manifest_id, value)
            continue
        version, _, band = value.strip().partition("/")
        refs.append(WorkloadManifestRef(
            manifest_id=str(manifest_id).lower(),
            version=version,
            feature_band=band or default_band,
        ))
    return refs


class WorkloadSetContentsReader:
    """Download a workload set package and list the manifests it pins."""

    def read(self, candidate: WorkloadSetCandidate) -> Optional[WorkloadSetContents]:
        """Return the manifests of ``candidate``, or None when unreadable."""
        document = read_package_json(
            candidate.package_id, candidate.version, Constants.WORKLOAD_SET_FILE
        )
        if document is None:
            logger.warning(
                "Workload set %s %s has no readable %s",
                candidate.package_id,
                candidate.version,
                Constants.WORKLOAD_SET_FILE,
            )
            return None
        refs = parse_workload_set_json(document, candidate.version_band)
        return WorkloadSetContents(candidate=candidate, manifests=tuple(refs))

    def fetch_dependency_document(self, manifest: WorkloadManifestRef) -> Optional[Any]:
        """Return the parsed WorkloadDependencies.json of ``manifest``, or None."""
        return read_package_json(
            manifest.package_id, manifest.version, Constants.WORKLOAD_DEPENDENCIES_FILE
        )
