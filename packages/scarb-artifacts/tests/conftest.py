"""Shared pytest fixtures for scarb-artifacts tests.

This module provides:
- structlog configuration for output capture
- Scarb workspace metadata resembling `scarb metadata` output
- Helpers writing manifests and Sierra files to a temporary target directory
- A fake bytecode producer recording its invocations
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import structlog

from scarb_artifacts.compiler import SierraType
from scarb_artifacts.errors import CompileError
from scarb_artifacts.metadata import WorkspaceMetadata

PACKAGE_ID = "basic_package 0.1.0 (path+file:///workspace/Scarb.toml)"
STARKNET_ID = "starknet 2.8.2 (std)"

WriteManifest = Callable[..., Path]


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


class FakeProducer:
    """Bytecode producer returning `casm:<sierra file name>`.

    Attributes:
        calls: Recorded (sierra_path, base_dir, sierra_type) invocations.
        fail_on: Sierra file names for which compilation fails.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[Path, Path | None, SierraType]] = []
        self.fail_on: set[str] = set()

    def compile_sierra_at_path(
        self,
        sierra_path: Path,
        base_dir: Path | None,
        sierra_type: SierraType,
    ) -> str:
        self.calls.append((sierra_path, base_dir, sierra_type))
        if sierra_path.name in self.fail_on:
            raise CompileError(sierra_path, "error: invalid sierra program")
        return f"casm:{sierra_path.name}"


@pytest.fixture
def fake_producer() -> FakeProducer:
    """Return a fresh FakeProducer."""
    return FakeProducer()


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    """Return an empty `target/dev` directory."""
    path = tmp_path / "target" / "dev"
    path.mkdir(parents=True)
    return path


def sierra_file_name(manifest_name: str, contract_name: str) -> str:
    """Name of the Sierra file written for a contract of a manifest."""
    return f"{manifest_name.split('.')[0]}_{contract_name}.contract_class.json"


@pytest.fixture
def write_manifest() -> WriteManifest:
    """Return a helper writing a manifest and its Sierra files.

    The helper takes the directory, the manifest file name and a mapping of
    contract name to Sierra content, and returns the manifest path.
    """

    def _write(
        directory: Path,
        manifest_name: str,
        contracts: dict[str, str],
        *,
        package_name: str = "basic_package",
    ) -> Path:
        entries: list[dict[str, Any]] = []
        for contract_name, sierra in contracts.items():
            file_name = sierra_file_name(manifest_name, contract_name)
            (directory / file_name).write_bytes(sierra.encode("utf-8"))
            entries.append(
                {
                    "id": f"{package_name}::{contract_name}",
                    "package_name": package_name,
                    "contract_name": contract_name,
                    "module_path": f"{package_name}::{contract_name}",
                    "artifacts": {"sierra": file_name, "casm": None},
                }
            )
        path = directory / manifest_name
        path.write_text(json.dumps({"version": 1, "contracts": entries}))
        return path

    return _write


def _target(kind: str, name: str, **params: Any) -> dict[str, Any]:
    return {
        "kind": kind,
        "name": name,
        "source_path": f"/workspace/src/{name}.cairo",
        "params": params,
    }


@pytest.fixture
def metadata_dict() -> dict[str, Any]:
    """Return `scarb metadata --format-version 1` output for basic_package.

    basic_package has a starknet-contract target, a unit test build and an
    integration test build made of two test targets sharing one group id.
    """
    contract_target = _target("starknet-contract", "basic_package", sierra=True)
    lib_target = _target("lib", "basic_package")
    unit_target = _target(
        "test",
        "basic_package_unittest",
        **{"group-id": "basic_package_unittest", "test-type": "unit"},
    )
    integration_targets = [
        _target(
            "test",
            name,
            **{"group-id": "basic_package_integrationtest", "test-type": "integration"},
        )
        for name in ("basic_package_tests_erc20", "basic_package_tests_hello")
    ]
    return {
        "version": 1,
        "app_exe": "/usr/bin/scarb",
        "target_dir": "/workspace/target",
        "workspace": {
            "manifest_path": "/workspace/Scarb.toml",
            "root": "/workspace",
            "members": [PACKAGE_ID],
        },
        "packages": [
            {
                "id": PACKAGE_ID,
                "name": "basic_package",
                "version": "0.1.0",
                "root": "/workspace",
                "manifest_path": "/workspace/Scarb.toml",
                "dependencies": [{"name": "starknet", "version_req": "2.8.2"}],
                "targets": [contract_target, lib_target, unit_target, *integration_targets],
            },
            {
                "id": STARKNET_ID,
                "name": "starknet",
                "version": "2.8.2",
                "root": "/opt/corelib/starknet",
                "manifest_path": "/opt/corelib/starknet/Scarb.toml",
                "targets": [_target("lib", "starknet")],
            },
        ],
        "compilation_units": [
            {"id": "cu-test-unit", "package": PACKAGE_ID, "target": unit_target},
            {"id": "cu-lib", "package": PACKAGE_ID, "target": lib_target},
            {"id": "cu-contract", "package": PACKAGE_ID, "target": contract_target},
        ],
        "current_profile": "dev",
    }


@pytest.fixture
def workspace_metadata(metadata_dict: dict[str, Any]) -> WorkspaceMetadata:
    """Return metadata_dict validated into WorkspaceMetadata."""
    return WorkspaceMetadata.model_validate(metadata_dict)
