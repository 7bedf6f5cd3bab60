"""scarb-artifacts: compiled Starknet contract artifacts of Scarb packages.

This package provides:
- WorkspaceMetadata: typed view of `scarb metadata` output
- ScarbCommand: run scarb to obtain metadata and versions
- get_contracts_artifacts_and_source_sierra_paths: resolve, materialize and
  merge the contract artifacts of one package
- l1_handler_execute: dispatch an L1 message into a contract's L1 handler

Example:
    >>> from scarb_artifacts import (
    ...     ScarbCommand,
    ...     get_contracts_artifacts_and_source_sierra_paths,
    ...     profile_target_dir,
    ... )
    >>> metadata = ScarbCommand(current_dir="my_project").metadata()
    >>> contracts = get_contracts_artifacts_and_source_sierra_paths(
    ...     metadata, profile_target_dir(metadata), metadata.packages[0], True
    ... )
"""

from __future__ import annotations

__version__ = "0.1.0"

from scarb_artifacts.command import ScarbCommand, ScarbVersionInfo
from scarb_artifacts.compiler import BytecodeProducer, SierraType, UniversalSierraCompiler
from scarb_artifacts.config import ResolverSettings
from scarb_artifacts.errors import (
    AmbiguousVersionQueryError,
    CompilationUnitNotFoundError,
    CompileError,
    ConfigurationError,
    DuplicatePackageError,
    NotFoundError,
    PackageNotFoundError,
    ParseError,
    ReadError,
    ScarbArtifactsError,
    ScarbCommandError,
)
from scarb_artifacts.l1_handler import ExecutionContext, l1_handler_execute, starknet_keccak
from scarb_artifacts.locations import (
    ArtifactManifestLocation,
    CandidateResolver,
    FilesystemCandidates,
    manifest_locations_for_package,
)
from scarb_artifacts.manifest import StarknetArtifacts, StarknetContract, load_manifest
from scarb_artifacts.materializer import ArtifactMap, ContractArtifacts
from scarb_artifacts.merger import merge_contracts_artifacts, order_by_precedence
from scarb_artifacts.metadata import (
    CompilationUnitMetadata,
    PackageMetadata,
    TargetMetadata,
    TestType,
    WorkspaceMetadata,
    name_for_package,
    package_matches_version_requirement,
    profile_target_dir,
    target_dir_for_workspace,
    test_targets_by_name,
)
from scarb_artifacts.resolver import get_contracts_artifacts_and_source_sierra_paths
from scarb_artifacts.selector import compilation_unit_for_package, target_name_for_package

__all__ = [
    "__version__",
    # Resolution
    "get_contracts_artifacts_and_source_sierra_paths",
    "manifest_locations_for_package",
    "merge_contracts_artifacts",
    "order_by_precedence",
    "load_manifest",
    "ArtifactManifestLocation",
    "ArtifactMap",
    "CandidateResolver",
    "ContractArtifacts",
    "FilesystemCandidates",
    "StarknetArtifacts",
    "StarknetContract",
    # Metadata
    "WorkspaceMetadata",
    "PackageMetadata",
    "CompilationUnitMetadata",
    "TargetMetadata",
    "TestType",
    "compilation_unit_for_package",
    "target_name_for_package",
    "name_for_package",
    "package_matches_version_requirement",
    "target_dir_for_workspace",
    "profile_target_dir",
    "test_targets_by_name",
    # External tools
    "ScarbCommand",
    "ScarbVersionInfo",
    "BytecodeProducer",
    "SierraType",
    "UniversalSierraCompiler",
    "ResolverSettings",
    # L1 handler
    "ExecutionContext",
    "l1_handler_execute",
    "starknet_keccak",
    # Errors
    "ScarbArtifactsError",
    "NotFoundError",
    "PackageNotFoundError",
    "CompilationUnitNotFoundError",
    "ReadError",
    "ParseError",
    "CompileError",
    "AmbiguousVersionQueryError",
    "DuplicatePackageError",
    "ScarbCommandError",
    "ConfigurationError",
]
