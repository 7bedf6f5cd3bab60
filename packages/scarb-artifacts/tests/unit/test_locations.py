"""Unit tests for candidate manifest locations."""

from __future__ import annotations

from pathlib import Path

import pytest

from scarb_artifacts.errors import CompilationUnitNotFoundError
from scarb_artifacts.locations import (
    ArtifactManifestLocation,
    FilesystemCandidates,
    get_starknet_artifacts_path,
    get_starknet_artifacts_paths_from_test_targets,
    manifest_locations_for_package,
)
from scarb_artifacts.metadata import (
    PackageMetadata,
    TestType as TargetTestType,
    WorkspaceMetadata,
    test_targets_by_name as group_test_targets,
)

TARGET_DIR = Path("/workspace/target/dev")


class InMemoryCandidates:
    """CandidateResolver answering from a fixed set of paths."""

    def __init__(self, *paths: Path) -> None:
        self.paths = set(paths)
        self.checked: list[Path] = []

    def exists(self, path: Path) -> bool:
        self.checked.append(path)
        return path in self.paths


class TestArtifactManifestLocation:
    """Tests for ArtifactManifestLocation equality."""

    def test_equal_when_path_and_type_match(self) -> None:
        """Locations with the same path and test type are equal."""
        a = ArtifactManifestLocation(path=Path("a.json"), test_type=TargetTestType.UNIT)
        b = ArtifactManifestLocation(path=Path("a.json"), test_type=TargetTestType.UNIT)

        assert a == b
        assert hash(a) == hash(b)

    def test_different_test_type_not_equal(self) -> None:
        """Test type is part of the identity."""
        unit = ArtifactManifestLocation(path=Path("a.json"), test_type=TargetTestType.UNIT)
        plain = ArtifactManifestLocation(path=Path("a.json"))

        assert unit != plain


class TestStandardBuild:
    """Tests for `scarb build` manifest locations."""

    def test_existing_manifest(self) -> None:
        """The manifest is named after the target."""
        path = TARGET_DIR / "basic_package.starknet_artifacts.json"

        location = get_starknet_artifacts_path(TARGET_DIR, "basic_package", InMemoryCandidates(path))

        assert location == ArtifactManifestLocation(path=path, test_type=None)

    def test_missing_manifest(self) -> None:
        """A missing manifest yields None, not an error."""
        assert get_starknet_artifacts_path(TARGET_DIR, "basic_package", InMemoryCandidates()) is None

    def test_filesystem_candidates(self, target_dir: Path) -> None:
        """The default resolver checks the filesystem."""
        path = target_dir / "essa.starknet_artifacts.json"
        path.write_text("{}")

        assert get_starknet_artifacts_path(target_dir, "essa") == ArtifactManifestLocation(
            path=path
        )
        assert get_starknet_artifacts_path(target_dir, "basic_package") is None
        assert FilesystemCandidates().exists(path)


class TestTestBuild:
    """Tests for `scarb build --test` manifest locations."""

    def test_unit_and_integration(self, workspace_metadata: WorkspaceMetadata) -> None:
        """Every existing test build manifest is tagged with its test type."""
        unit = TARGET_DIR / "basic_package_unittest.test.starknet_artifacts.json"
        integration = TARGET_DIR / "basic_package_integrationtest.test.starknet_artifacts.json"
        package = workspace_metadata.packages[0]

        locations = get_starknet_artifacts_paths_from_test_targets(
            TARGET_DIR, group_test_targets(package), InMemoryCandidates(unit, integration)
        )

        assert locations == [
            ArtifactManifestLocation(path=unit, test_type=TargetTestType.UNIT),
            ArtifactManifestLocation(path=integration, test_type=TargetTestType.INTEGRATION),
        ]

    def test_only_unit_build_present(self, workspace_metadata: WorkspaceMetadata) -> None:
        """Missing test build manifests are skipped."""
        unit = TARGET_DIR / "basic_package_unittest.test.starknet_artifacts.json"
        package = workspace_metadata.packages[0]
        candidates = InMemoryCandidates(unit)

        locations = get_starknet_artifacts_paths_from_test_targets(
            TARGET_DIR, group_test_targets(package), candidates
        )

        assert locations == [ArtifactManifestLocation(path=unit, test_type=TargetTestType.UNIT)]
        # Two test targets share the integration group; it is checked once
        assert len(candidates.checked) == 2

    def test_no_test_targets(self) -> None:
        """A package without test targets has no candidates."""
        assert get_starknet_artifacts_paths_from_test_targets(TARGET_DIR, {}) == []


class TestManifestLocationsForPackage:
    """Tests for build mode selection."""

    def test_standard_mode(self, workspace_metadata: WorkspaceMetadata) -> None:
        """Standard mode looks up the canonical target's manifest only."""
        path = TARGET_DIR / "basic_package.starknet_artifacts.json"
        unit = TARGET_DIR / "basic_package_unittest.test.starknet_artifacts.json"
        package = workspace_metadata.packages[0]

        locations = manifest_locations_for_package(
            workspace_metadata, TARGET_DIR, package, False, InMemoryCandidates(path, unit)
        )

        assert locations == [ArtifactManifestLocation(path=path)]

    def test_test_mode(self, workspace_metadata: WorkspaceMetadata) -> None:
        """Test mode ignores the standard build manifest."""
        path = TARGET_DIR / "basic_package.starknet_artifacts.json"
        unit = TARGET_DIR / "basic_package_unittest.test.starknet_artifacts.json"
        package = workspace_metadata.packages[0]

        locations = manifest_locations_for_package(
            workspace_metadata, TARGET_DIR, package, True, InMemoryCandidates(path, unit)
        )

        assert locations == [ArtifactManifestLocation(path=unit, test_type=TargetTestType.UNIT)]

    def test_standard_mode_without_build(self, workspace_metadata: WorkspaceMetadata) -> None:
        """No manifest on disk yields no locations."""
        package = workspace_metadata.packages[0]

        assert (
            manifest_locations_for_package(
                workspace_metadata, TARGET_DIR, package, False, InMemoryCandidates()
            )
            == []
        )

    def test_standard_mode_without_compilation_unit(
        self, workspace_metadata: WorkspaceMetadata
    ) -> None:
        """A package without compilation units cannot be resolved in standard mode."""
        package = PackageMetadata(id="orphan 0.1.0", name="orphan", version="0.1.0")

        with pytest.raises(CompilationUnitNotFoundError):
            manifest_locations_for_package(
                workspace_metadata, TARGET_DIR, package, False, InMemoryCandidates()
            )
