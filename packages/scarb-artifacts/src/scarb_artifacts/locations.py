"""Candidate manifest locations of a package.

Scarb writes one manifest per build:
- `scarb build`:        <target_dir>/<target_name>.starknet_artifacts.json
- `scarb build --test`: <target_dir>/<group>.test.starknet_artifacts.json
  for every test build (unit tests, integration tests)

Locations that do not exist are dropped. Which locations exist is answered by
a CandidateResolver so the path logic can run against in-memory fixtures.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from scarb_artifacts.metadata import (
    PackageMetadata,
    TargetMetadata,
    TestType,
    WorkspaceMetadata,
    test_targets_by_name,
)
from scarb_artifacts.selector import target_name_for_package

STARKNET_ARTIFACTS_SUFFIX = ".starknet_artifacts.json"
TEST_STARKNET_ARTIFACTS_SUFFIX = ".test.starknet_artifacts.json"


class ArtifactManifestLocation(BaseModel):
    """A manifest file and the test build it belongs to.

    Attributes:
        path: Manifest file path.
        test_type: None for a standard build, otherwise the test build type.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path = Field(..., description="Manifest file path")
    test_type: TestType | None = Field(default=None, description="Test build type")


class CandidateResolver(Protocol):
    """Decides whether a candidate manifest path is present."""

    def exists(self, path: Path) -> bool:
        """Return True if a manifest is present at `path`."""
        ...


class FilesystemCandidates:
    """CandidateResolver backed by the local filesystem."""

    def exists(self, path: Path) -> bool:
        return path.exists()


def get_starknet_artifacts_path(
    target_dir: Path,
    target_name: str,
    candidates: CandidateResolver | None = None,
) -> ArtifactManifestLocation | None:
    """Location of the manifest produced by `scarb build`, if present."""
    candidates = candidates or FilesystemCandidates()
    path = target_dir / f"{target_name}{STARKNET_ARTIFACTS_SUFFIX}"
    if not candidates.exists(path):
        return None
    return ArtifactManifestLocation(path=path)


def get_starknet_artifacts_paths_from_test_targets(
    target_dir: Path,
    test_targets: dict[str, TargetMetadata],
    candidates: CandidateResolver | None = None,
) -> list[ArtifactManifestLocation]:
    """Locations of manifests produced by `scarb build --test`, if present.

    Args:
        target_dir: Profile target directory (e.g. `<workspace>/target/dev`).
        test_targets: Test targets keyed by grouping key, see test_targets_by_name.
        candidates: Existence check for candidate paths.

    Returns:
        Existing locations in the order of `test_targets`, each tagged with
        the test type of its target.
    """
    candidates = candidates or FilesystemCandidates()
    locations: list[ArtifactManifestLocation] = []
    for group_name, target in test_targets.items():
        # Guaranteed for test targets by TargetMetadata validation
        assert target.test_type is not None
        path = target_dir / f"{group_name}{TEST_STARKNET_ARTIFACTS_SUFFIX}"
        if candidates.exists(path):
            locations.append(ArtifactManifestLocation(path=path, test_type=target.test_type))
    return locations


def manifest_locations_for_package(
    metadata: WorkspaceMetadata,
    target_dir: Path,
    package: PackageMetadata,
    use_test_target_contracts: bool,
    candidates: CandidateResolver | None = None,
) -> list[ArtifactManifestLocation]:
    """Existing manifest locations for a package in the requested build mode.

    Raises:
        CompilationUnitNotFoundError: In standard mode, if the package has no
            compilation unit.
    """
    if use_test_target_contracts:
        return get_starknet_artifacts_paths_from_test_targets(
            target_dir, test_targets_by_name(package), candidates
        )

    target_name = target_name_for_package(metadata, package.id)
    location = get_starknet_artifacts_path(target_dir, target_name, candidates)
    return [location] if location is not None else []
