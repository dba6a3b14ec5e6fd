"""Tests for reading workload set contents."""

from unittest.mock import patch

from versioning.models import WorkloadManifestRef, WorkloadSetCandidate
from versioning.workload_contents import WorkloadSetContentsReader, parse_workload_set_json

CANDIDATE = WorkloadSetCandidate(
    package_id="Microsoft.NET.Workloads.9.0.100",
    version="9.100.0",
    version_band="9.0.100",
)


class TestParseWorkloadSetJson:
    """Test parse_workload_set_json."""

    def test_parses_versions_and_bands(self):
        """Test version/band pairs and the default band."""
        refs = parse_workload_set_json({
            "Microsoft.NET.Sdk.Android": "35.0.7/9.0.100",
            "microsoft.net.sdk.ios": "18.0.9617",
            "microsoft.net.sdk.bad": 5,
        }, "9.0.100")

        assert refs == [
            WorkloadManifestRef("microsoft.net.sdk.android", "35.0.7", "9.0.100"),
            WorkloadManifestRef("microsoft.net.sdk.ios", "18.0.9617", "9.0.100"),
        ]

    def test_non_mapping(self):
        """Test unexpected documents yield no manifests."""
        assert parse_workload_set_json(["x"], "9.0.100") == []

    def test_manifest_package_id(self):
        """Test NuGet id casing of manifest packages."""
        assert WorkloadManifestRef("microsoft.net.sdk.android", "35.0.7", "9.0.100").package_id == (
            "Microsoft.NET.Sdk.Android.Manifest-9.0.100"
        )
        assert WorkloadManifestRef("microsoft.net.sdk.ios", "18.0.1", "9.0.100").package_id == (
            "Microsoft.NET.Sdk.iOS.Manifest-9.0.100"
        )
        assert WorkloadManifestRef("microsoft.net.sdk.maccatalyst", "18.0.1", "9.0.100").package_id == (
            "Microsoft.NET.Sdk.MacCatalyst.Manifest-9.0.100"
        )


class TestWorkloadSetContentsReader:
    """Test WorkloadSetContentsReader."""

    @patch("versioning.workload_contents.read_package_json")
    def test_read(self, mock_read):
        """Test the workload set member is read and parsed."""
        mock_read.return_value = {"microsoft.net.sdk.android": "35.0.7/9.0.100"}

        contents = WorkloadSetContentsReader().read(CANDIDATE)

        assert contents.candidate == CANDIDATE
        assert contents.manifest_for("android").version == "35.0.7"
        assert contents.manifest_for("ios") is None
        mock_read.assert_called_once_with(
            "Microsoft.NET.Workloads.9.0.100", "9.100.0", "data/microsoft.net.workloads.workloadset.json"
        )

    @patch("versioning.workload_contents.read_package_json")
    def test_read_unavailable(self, mock_read, caplog):
        """Test None with a warning when the package cannot be read."""
        mock_read.return_value = None

        assert WorkloadSetContentsReader().read(CANDIDATE) is None
        assert "has no readable" in caplog.text

    @patch("versioning.workload_contents.read_package_json")
    def test_fetch_dependency_document(self, mock_read):
        """Test the dependency document comes from the manifest package."""
        mock_read.return_value = {"microsoft.net.sdk.android": {}}
        ref = WorkloadManifestRef("microsoft.net.sdk.android", "35.0.7", "9.0.100")

        document = WorkloadSetContentsReader().fetch_dependency_document(ref)

        assert document == {"microsoft.net.sdk.android": {}}
        mock_read.assert_called_once_with(
            "Microsoft.NET.Sdk.Android.Manifest-9.0.100", "35.0.7", "data/WorkloadDependencies.json"
        )
