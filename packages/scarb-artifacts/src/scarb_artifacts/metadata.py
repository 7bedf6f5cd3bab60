"""Typed view of Scarb workspace metadata.

This module provides:
- Pydantic models for `scarb metadata --format-version 1` output
- TestType: closed enumeration of test target types
- Package lookups: name_for_package, package_matches_version_requirement
- Test target grouping: test_targets_by_name
- Target directory helpers

String-keyed target params ("group-id", "test-type") are validated into
explicit TargetMetadata fields when the metadata is ingested.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError
from semantic_version import SimpleSpec, Version
from typing_extensions import Self

from scarb_artifacts.config import DEFAULT_PROFILE
from scarb_artifacts.errors import DuplicatePackageError, PackageNotFoundError, ParseError

TEST_TARGET_KIND = "test"
GROUP_ID_PARAM = "group-id"
TEST_TYPE_PARAM = "test-type"

METADATA_FORMAT_VERSION = 1
METADATA_PARSE_HINT = "Make sure the metadata was produced by `scarb metadata --format-version 1`"


class TestType(str, Enum):
    """Kind of test build a test target belongs to.

    Values:
        UNIT: Tests compiled together with the package sources.
        INTEGRATION: Tests under the package's tests/ directory.
    """

    UNIT = "unit"
    INTEGRATION = "integration"


class TargetMetadata(BaseModel):
    """A build target of a package.

    Attributes:
        kind: Target kind (e.g. "starknet-contract", "lib", "test").
        name: Target name; used to name build outputs.
        source_path: Entry source file of the target.
        params: Raw target parameters as emitted by Scarb.
        group_id: Value of the "group-id" param, if any.
        test_type: Value of the "test-type" param, required for test targets.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: str = Field(..., min_length=1, description="Target kind")
    name: str = Field(..., min_length=1, description="Target name")
    source_path: Path | None = Field(default=None, description="Target entry file")
    params: dict[str, Any] = Field(default_factory=dict, description="Raw target params")
    group_id: str | None = Field(default=None, description="Test grouping id")
    test_type: TestType | None = Field(default=None, description="Test build type")

    @model_validator(mode="before")
    @classmethod
    def extract_params(cls, data: Any) -> Any:
        """Lift "group-id" and "test-type" out of the params bag."""
        if not isinstance(data, dict):
            return data
        params = data.get("params") or {}
        if not isinstance(params, dict):
            # Left for field validation to reject
            return data
        data = dict(data)
        if data.get("group_id") is None and isinstance(params.get(GROUP_ID_PARAM), str):
            data["group_id"] = params[GROUP_ID_PARAM]
        if data.get("test_type") is None and params.get(TEST_TYPE_PARAM) is not None:
            data["test_type"] = params[TEST_TYPE_PARAM]
        return data

    @model_validator(mode="after")
    def validate_test_target(self) -> Self:
        """Test targets must declare their test type.

        Raises:
            ValueError: If a target of kind "test" has no test type.
        """
        if self.kind == TEST_TARGET_KIND and self.test_type is None:
            raise ValueError(f"test target {self.name!r} is missing the {TEST_TYPE_PARAM!r} param")
        return self

    @property
    def grouping_key(self) -> str:
        """Name shared by all targets compiled into one test build.

        Unit tests are grouped by "group-id"; integration tests fall back to
        the target name.
        """
        return self.group_id if self.group_id is not None else self.name


class PackageMetadata(BaseModel):
    """A package of the workspace or one of its dependencies."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Unique package id")
    name: str = Field(..., min_length=1, description="Package name")
    version: str = Field(..., min_length=1, description="Semantic version")
    root: Path | None = Field(default=None, description="Package root directory")
    manifest_path: Path | None = Field(default=None, description="Path to Scarb.toml")
    targets: list[TargetMetadata] = Field(default_factory=list, description="Build targets")


class CompilationUnitMetadata(BaseModel):
    """One build configuration producing one named output for one package."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Compilation unit id")
    package: str = Field(..., min_length=1, description="Id of the owning package")
    target: TargetMetadata = Field(..., description="Target built by this unit")


class WorkspaceInfo(BaseModel):
    """Workspace root and member packages."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    root: Path = Field(..., description="Workspace root directory")
    manifest_path: Path | None = Field(default=None, description="Workspace Scarb.toml")
    members: list[str] = Field(default_factory=list, description="Member package ids")


class WorkspaceMetadata(BaseModel):
    """Read-only snapshot of a Scarb workspace.

    Every test target must declare a "test-type" param, in dependency
    packages too. Metadata from Scarb releases that predate test types is
    rejected at ingestion with ParseError.

    Example:
        >>> metadata = WorkspaceMetadata.from_json(Path("metadata.json").read_text())
        >>> [p.name for p in metadata.packages]
        ['basic_package', 'snforge_std', 'core', 'starknet']
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    version: int = Field(default=METADATA_FORMAT_VERSION, description="Metadata format version")
    target_dir: Path | None = Field(default=None, description="Configured target directory")
    workspace: WorkspaceInfo = Field(..., description="Workspace information")
    packages: list[PackageMetadata] = Field(default_factory=list)
    compilation_units: list[CompilationUnitMetadata] = Field(default_factory=list)
    current_profile: str = Field(default=DEFAULT_PROFILE, description="Active build profile")

    @classmethod
    def from_json(cls, content: str | bytes, *, source: str = "<metadata>") -> WorkspaceMetadata:
        """Parse metadata JSON.

        Args:
            content: JSON document produced by `scarb metadata`.
            source: Label used in error messages.

        Raises:
            ParseError: If the document does not match the metadata structure.
        """
        try:
            return cls.model_validate_json(content)
        except PydanticValidationError as e:
            raise ParseError(source, hint=METADATA_PARSE_HINT, cause=str(e)) from e

    def get_package(self, package_id: str) -> PackageMetadata | None:
        """Return the package with the given id, if present."""
        return next((p for p in self.packages if p.id == package_id), None)


def target_dir_for_workspace(metadata: WorkspaceMetadata) -> Path:
    """Return the configured target directory, or `<workspace root>/target`."""
    if metadata.target_dir is not None:
        return metadata.target_dir
    return metadata.workspace.root / "target"


def profile_target_dir(metadata: WorkspaceMetadata, profile: str | None = None) -> Path:
    """Return the directory Scarb writes artifacts of `profile` to.

    Args:
        metadata: Workspace metadata.
        profile: Build profile. Defaults to the metadata's current profile.
    """
    return target_dir_for_workspace(metadata) / (profile or metadata.current_profile)


def name_for_package(metadata: WorkspaceMetadata, package_id: str) -> str:
    """Get the name of the given package.

    Raises:
        PackageNotFoundError: If no package has this id.
    """
    package = metadata.get_package(package_id)
    if package is None:
        raise PackageNotFoundError(package_id)
    return package.name


def _cargo_clause(clause: str) -> str:
    # Cargo reads a bare version as a caret requirement and "=" as exact match
    if clause[0].isdigit():
        return f"^{clause}"
    if clause.startswith("=") and not clause.startswith("=="):
        return f"={clause}"
    return clause


def _cargo_requirement(requirement: str) -> SimpleSpec:
    clauses = [clause.replace(" ", "") for clause in requirement.split(",")]
    return SimpleSpec(",".join(_cargo_clause(clause) for clause in clauses if clause))


def package_matches_version_requirement(
    metadata: WorkspaceMetadata,
    name: str,
    requirement: str,
) -> bool:
    """Check if the package called `name` satisfies a version requirement.

    Args:
        metadata: Workspace metadata.
        name: Package name (not id).
        requirement: Cargo-style requirement, e.g. "2.5", "^2.5", ">=2.4, <3".

    Raises:
        PackageNotFoundError: If no package has this name.
        DuplicatePackageError: If more than one package has this name.
        ValueError: If the requirement cannot be parsed.
    """
    packages = [p for p in metadata.packages if p.name == name]
    if not packages:
        raise PackageNotFoundError(name, f"Package {name} is not present in dependencies.")
    if len(packages) > 1:
        raise DuplicatePackageError(name)
    return Version(packages[0].version) in _cargo_requirement(requirement)


def test_targets_by_name(package: PackageMetadata) -> dict[str, TargetMetadata]:
    """Collect the test targets of a package keyed by grouping key.

    Several targets can share one compiled test build, so they are deduplicated
    by their grouping key. The first occurrence fixes the key's position; a
    later target with the same key replaces the value.
    """
    return {
        target.grouping_key: target
        for target in package.targets
        if target.kind == TEST_TARGET_KIND
    }

