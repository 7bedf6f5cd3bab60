"""Selection of a package's canonical compilation unit."""

from __future__ import annotations

from scarb_artifacts.errors import CompilationUnitNotFoundError
from scarb_artifacts.metadata import CompilationUnitMetadata, WorkspaceMetadata

STARKNET_CONTRACT_KIND = "starknet-contract"
LIB_KIND = "lib"

# Lower ranks win; kinds not listed rank after all listed ones
KIND_PRIORITY: dict[str, int] = {
    STARKNET_CONTRACT_KIND: 0,
    LIB_KIND: 1,
}


def compilation_unit_sort_key(unit: CompilationUnitMetadata) -> tuple[int, str]:
    """Order compilation units by (kind priority, kind name)."""
    kind = unit.target.kind
    return KIND_PRIORITY.get(kind, len(KIND_PRIORITY)), kind


def compilation_unit_for_package(
    metadata: WorkspaceMetadata,
    package_id: str,
) -> CompilationUnitMetadata:
    """Pick the canonical compilation unit of a package.

    A "starknet-contract" unit is preferred over a "lib" unit, which is
    preferred over any other kind. Units of other kinds are ordered by kind
    name, so the choice does not depend on metadata order.

    Raises:
        CompilationUnitNotFoundError: If the package has no compilation unit.
    """
    units = [unit for unit in metadata.compilation_units if unit.package == package_id]
    if not units:
        raise CompilationUnitNotFoundError(package_id)
    return min(units, key=compilation_unit_sort_key)


def target_name_for_package(metadata: WorkspaceMetadata, package_id: str) -> str:
    """Get the target name of the package's canonical compilation unit."""
    return compilation_unit_for_package(metadata, package_id).target.name
