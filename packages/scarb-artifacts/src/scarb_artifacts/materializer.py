"""Materialize manifest entries into Sierra and CASM artifact bodies.

This module provides:
- ContractArtifacts: immutable Sierra/CASM pair of one contract
- ArtifactMap: contract name -> (ContractArtifacts, absolute Sierra path)
- materialize_contract: artifacts of a single manifest entry
- load_contracts_artifacts_and_source_sierra_paths: artifacts of a whole manifest
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from scarb_artifacts.compiler import BytecodeProducer, SierraType
from scarb_artifacts.errors import ReadError
from scarb_artifacts.manifest import StarknetContract, load_manifest
from scarb_artifacts.observability import get_logger


class ContractArtifacts(BaseModel):
    """Compiled Starknet artifacts of one contract.

    Attributes:
        sierra: Sierra contract class, exactly as written by Scarb.
        casm: CASM produced from the Sierra contract class.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sierra: str = Field(..., description="Sierra contract class")
    casm: str = Field(..., description="Compiled CASM")


ArtifactMap = dict[str, tuple[ContractArtifacts, Path]]


def _read_exact(path: Path) -> str:
    # No newline translation: the text must match the file byte for byte
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(path, cause=str(e)) from e


def materialize_contract(
    contract: StarknetContract,
    base_path: Path,
    producer: BytecodeProducer,
) -> tuple[ContractArtifacts, Path]:
    """Read a contract's Sierra file and compile it to CASM.

    Args:
        contract: Manifest entry.
        base_path: Directory of the manifest the entry comes from.
        producer: Sierra to CASM compiler.

    Returns:
        The artifacts and the absolute path of the Sierra file.

    Raises:
        ReadError: If the Sierra file cannot be read.
        CompileError: If CASM compilation fails.
    """
    sierra_path = base_path / contract.artifacts.sierra
    sierra = _read_exact(sierra_path)
    casm = producer.compile_sierra_at_path(sierra_path, base_path, SierraType.CONTRACT)

    get_logger().debug(
        "contract_materialized",
        contract=contract.contract_name,
        sierra_path=str(sierra_path),
    )
    return ContractArtifacts(sierra=sierra, casm=casm), sierra_path


def load_contracts_artifacts_and_source_sierra_paths(
    manifest_path: Path,
    producer: BytecodeProducer,
    *,
    max_workers: int = 1,
) -> ArtifactMap:
    """Materialize every contract listed in one manifest.

    Args:
        manifest_path: Path to a `*.starknet_artifacts.json` file.
        producer: Sierra to CASM compiler.
        max_workers: Threads used for materialization. Results are inserted
            in manifest order regardless of completion order.

    Raises:
        ReadError: If the manifest or a Sierra file cannot be read.
        ParseError: If the manifest is malformed.
        CompileError: If CASM compilation fails.
    """
    manifest_path = manifest_path.absolute()
    base_path = manifest_path.parent
    manifest = load_manifest(manifest_path)

    if max_workers > 1 and len(manifest.contracts) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            materialized = list(
                pool.map(
                    lambda contract: materialize_contract(contract, base_path, producer),
                    manifest.contracts,
                )
            )
    else:
        materialized = [
            materialize_contract(contract, base_path, producer) for contract in manifest.contracts
        ]

    artifacts: ArtifactMap = {}
    for contract, result in zip(manifest.contracts, materialized):
        artifacts[contract.contract_name] = result
    return artifacts
