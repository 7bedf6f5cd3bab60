"""Resolve the compiled contracts of a package.

Entry point for test runners: given workspace metadata and a package, find
the package's manifests, materialize them and merge the results.
"""

from __future__ import annotations

from functools import partial
from pathlib import Path

from scarb_artifacts.compiler import BytecodeProducer, UniversalSierraCompiler
from scarb_artifacts.config import ResolverSettings
from scarb_artifacts.locations import (
    ArtifactManifestLocation,
    CandidateResolver,
    manifest_locations_for_package,
)
from scarb_artifacts.materializer import (
    ArtifactMap,
    load_contracts_artifacts_and_source_sierra_paths,
)
from scarb_artifacts.merger import merge_contracts_artifacts
from scarb_artifacts.metadata import PackageMetadata, WorkspaceMetadata
from scarb_artifacts.observability import resolution_span


def _load_location(
    location: ArtifactManifestLocation,
    *,
    package: str,
    producer: BytecodeProducer,
    max_workers: int,
) -> ArtifactMap:
    test_type = location.test_type.value if location.test_type is not None else None
    with resolution_span(
        "load_manifest",
        package=package,
        manifest=location.path,
        completed_level="debug",
        test_type=test_type,
    ) as s:
        artifacts = load_contracts_artifacts_and_source_sierra_paths(
            location.path, producer, max_workers=max_workers
        )
        s.set_attribute("scarb.contracts", len(artifacts))
        return artifacts


def get_contracts_artifacts_and_source_sierra_paths(
    metadata: WorkspaceMetadata,
    target_dir: Path,
    package: PackageMetadata,
    use_test_target_contracts: bool,
    *,
    producer: BytecodeProducer | None = None,
    candidates: CandidateResolver | None = None,
    settings: ResolverSettings | None = None,
) -> ArtifactMap:
    """Get the compiled contracts of a package with their Sierra file paths.

    Args:
        metadata: Workspace metadata.
        target_dir: Profile target directory (e.g. `<workspace>/target/dev`).
        package: Package to resolve contracts for.
        use_test_target_contracts: Read manifests of `scarb build --test`
            instead of `scarb build`.
        producer: Sierra to CASM compiler. Defaults to UniversalSierraCompiler.
        candidates: Existence check for manifest paths. Defaults to the filesystem.
        settings: Resolver settings. Defaults to ResolverSettings.from_env().

    Returns:
        Mapping of contract name to (artifacts, absolute Sierra path). Empty
        if no manifest exists for the package.

    Raises:
        CompilationUnitNotFoundError: In standard mode, if the package has no
            compilation unit.
        ReadError: If a manifest or Sierra file cannot be read.
        ParseError: If a manifest is malformed.
        CompileError: If CASM compilation fails.
        ConfigurationError: If `settings` is omitted and the environment
            holds an invalid setting.

    Example:
        >>> metadata = ScarbCommand(current_dir=Path("basic_package")).metadata()
        >>> package = metadata.packages[0]
        >>> contracts = get_contracts_artifacts_and_source_sierra_paths(
        ...     metadata, profile_target_dir(metadata), package, False
        ... )
        >>> sorted(contracts)
        ['ERC20', 'HelloStarknet']
    """
    settings = settings or ResolverSettings.from_env()
    producer = producer or UniversalSierraCompiler.from_settings(settings)

    with resolution_span(
        "resolve_contracts",
        package=package.name,
        target_dir=str(target_dir),
        use_test_target_contracts=use_test_target_contracts,
    ) as s:
        locations = manifest_locations_for_package(
            metadata, target_dir, package, use_test_target_contracts, candidates
        )
        s.set_attribute("scarb.manifests", len(locations))

        contracts = merge_contracts_artifacts(
            locations,
            partial(
                _load_location,
                package=package.name,
                producer=producer,
                max_workers=settings.max_workers,
            ),
        )
        s.set_attribute("scarb.contracts", len(contracts))
        return contracts
