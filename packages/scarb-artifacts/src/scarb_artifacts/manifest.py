"""Loader for `*.starknet_artifacts.json` manifests written by Scarb.

Manifest format:
    {
      "version": 1,
      "contracts": [
        {
          "id": "...",
          "package_name": "basic_package",
          "contract_name": "HelloStarknet",
          "artifacts": {"sierra": "basic_package_HelloStarknet.contract_class.json"}
        }
      ]
    }

Artifact paths are relative to the directory containing the manifest.
Unknown fields are ignored.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from scarb_artifacts.errors import ParseError, ReadError
from scarb_artifacts.observability import get_logger


class StarknetContractArtifactPaths(BaseModel):
    """Artifact file paths of one contract, relative to the manifest directory."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    sierra: Path = Field(..., description="Sierra contract class file")


class StarknetContract(BaseModel):
    """One contract entry of a manifest."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., description="Unique contract id")
    package_name: str = Field(..., description="Package defining the contract")
    contract_name: str = Field(..., description="Contract name")
    artifacts: StarknetContractArtifactPaths


class StarknetArtifacts(BaseModel):
    """Parsed `*.starknet_artifacts.json` manifest."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    version: int = Field(..., description="Manifest format version")
    contracts: list[StarknetContract] = Field(..., description="Contract entries")


def load_manifest(path: Path) -> StarknetArtifacts:
    """Read and parse a Starknet artifacts manifest.

    No semantic validation is done; an empty contract list is valid.

    Args:
        path: Path to a `*.starknet_artifacts.json` file.

    Raises:
        ReadError: If the file cannot be read.
        ParseError: If the content is not a valid manifest.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(path, cause=str(e)) from e

    try:
        manifest = StarknetArtifacts.model_validate_json(content)
    except PydanticValidationError as e:
        raise ParseError(path, cause=str(e)) from e

    get_logger().debug(
        "manifest_loaded",
        path=str(path),
        version=manifest.version,
        contracts=len(manifest.contracts),
    )
    return manifest
