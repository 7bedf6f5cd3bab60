"""Boundary to the Sierra to CASM compiler.

This module provides:
- SierraType: what a Sierra file describes (contract class or raw program)
- BytecodeProducer: protocol for anything that turns Sierra into CASM
- UniversalSierraCompiler: producer backed by the universal-sierra-compiler binary
"""

from __future__ import annotations

import subprocess
from enum import Enum
from pathlib import Path
from typing import Protocol

from scarb_artifacts.config import ResolverSettings
from scarb_artifacts.errors import CompileError
from scarb_artifacts.observability import get_logger


class SierraType(str, Enum):
    """Compilation target of a Sierra file.

    Values:
        CONTRACT: Starknet contract class (`*.contract_class.json`).
        RAW: Plain Sierra program.
    """

    CONTRACT = "contract"
    RAW = "raw"

    @property
    def subcommand(self) -> str:
        """universal-sierra-compiler subcommand for this type."""
        return f"compile-{self.value}"


class BytecodeProducer(Protocol):
    """Turns a Sierra file into compiled CASM text."""

    def compile_sierra_at_path(
        self,
        sierra_path: Path,
        base_dir: Path | None,
        sierra_type: SierraType,
    ) -> str:
        """Compile the Sierra file at `sierra_path`.

        Raises:
            CompileError: If compilation fails.
        """
        ...


class UniversalSierraCompiler:
    """Run `universal-sierra-compiler` as a subprocess.

    The compiled CASM JSON is read from the process' standard output.

    Example:
        >>> producer = UniversalSierraCompiler()
        >>> casm = producer.compile_sierra_at_path(
        ...     Path("target/dev/pkg_HelloStarknet.contract_class.json"),
        ...     Path("target/dev"),
        ...     SierraType.CONTRACT,
        ... )
    """

    def __init__(
        self,
        binary: str | None = None,
        *,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize UniversalSierraCompiler.

        Args:
            binary: Executable name or path. Defaults to the
                UNIVERSAL_SIERRA_COMPILER environment variable, then PATH lookup.
            timeout_seconds: Timeout for one compilation.
        """
        self.binary = binary or ResolverSettings.from_env().compiler_path
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: ResolverSettings) -> UniversalSierraCompiler:
        """Create a compiler from resolver settings."""
        return cls(settings.compiler_path, timeout_seconds=settings.compiler_timeout_seconds)

    def compile_sierra_at_path(
        self,
        sierra_path: Path,
        base_dir: Path | None,
        sierra_type: SierraType,
    ) -> str:
        """Compile a Sierra file to CASM.

        Args:
            sierra_path: Sierra file, absolute or relative to `base_dir`.
            base_dir: Working directory of the compiler process.
            sierra_type: Compilation target.

        Returns:
            CASM as text.

        Raises:
            CompileError: If the binary cannot be run, times out or exits non-zero.
        """
        command = [self.binary, sierra_type.subcommand, "--sierra-path", str(sierra_path)]
        get_logger().debug("casm_compilation_started", command=command)

        try:
            result = subprocess.run(
                command,
                cwd=base_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise CompileError(
                sierra_path, f"{self.binary} timed out after {self.timeout_seconds}s"
            ) from e
        except OSError as e:
            raise CompileError(sierra_path, f"Failed to run {self.binary}: {e}") from e

        if result.returncode != 0:
            raise CompileError(sierra_path, (result.stderr or result.stdout).strip())
        return result.stdout
