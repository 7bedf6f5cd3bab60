"""Custom exceptions for scarb-artifacts.

This module defines the exception hierarchy:
- ScarbArtifactsError (base)
- NotFoundError
  - PackageNotFoundError
  - CompilationUnitNotFoundError
- ReadError
- ParseError
- CompileError
- AmbiguousVersionQueryError
  - DuplicatePackageError
- ScarbCommandError
- ConfigurationError

NotFoundError subclasses describe "nothing to do" outcomes. Callers such as a
test runner may treat them as non-fatal; every other error aborts the
enclosing operation.
"""

from __future__ import annotations

from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

SIERRA_GENERATION_HINT = "Make sure you have enabled sierra code generation in Scarb.toml"


class ScarbArtifactsError(Exception):
    """Base exception for all scarb-artifacts operations.

    Attributes:
        message: Human-readable error description.
        details: Optional additional context about the error.

    Example:
        >>> try:
        ...     get_contracts_artifacts_and_source_sierra_paths(metadata, target_dir, package, False)
        ... except ScarbArtifactsError as e:
        ...     print(f"Artifact resolution failed: {e}")
    """

    def __init__(self, message: str, *, details: dict[str, str] | None = None) -> None:
        """Initialize ScarbArtifactsError.

        Args:
            message: Human-readable error description.
            details: Optional additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details if present."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class NotFoundError(ScarbArtifactsError):
    """A looked-up workspace entity does not exist.

    Distinct from real failures: "no compilation unit" or "no package" usually
    means there is nothing to resolve for the caller.
    """


class PackageNotFoundError(NotFoundError):
    """Package not present in the workspace metadata.

    Example:
        >>> try:
        ...     name_for_package(metadata, "missing 0.1.0 (path+file:///tmp)")
        ... except PackageNotFoundError as e:
        ...     print(e.package)
    """

    def __init__(self, package: str, message: str | None = None) -> None:
        """Initialize PackageNotFoundError.

        Args:
            package: Package id or name that was looked up.
            message: Optional custom error message.
        """
        msg = message or f"Failed to find metadata for package = {package}"
        super().__init__(msg, details={"package": package})
        self.package = package


class CompilationUnitNotFoundError(NotFoundError):
    """Package has no compilation unit in the workspace metadata."""

    def __init__(self, package: str) -> None:
        """Initialize CompilationUnitNotFoundError.

        Args:
            package: Id of the package without a compilation unit.
        """
        super().__init__(
            f"Failed to find compilation unit for package = {package}",
            details={"package": package},
        )
        self.package = package


class ReadError(ScarbArtifactsError):
    """A file could not be read from disk.

    Attributes:
        path: The offending path.
        cause: The underlying OS error message.
    """

    def __init__(self, path: Path | str, *, cause: str | None = None) -> None:
        """Initialize ReadError.

        Args:
            path: Path that could not be read.
            cause: The underlying cause of the failure.
        """
        details: dict[str, str] = {}
        if cause:
            details["cause"] = cause
        super().__init__(f"Failed to read {str(path)!r} contents", details=details)
        self.path = Path(path)
        self.cause = cause


class ParseError(ScarbArtifactsError):
    """A file was read but its content does not have the expected structure.

    Attributes:
        path: The file that failed to parse.
        hint: Remediation hint for the user.
    """

    def __init__(
        self,
        path: Path | str,
        *,
        hint: str | None = SIERRA_GENERATION_HINT,
        cause: str | None = None,
    ) -> None:
        """Initialize ParseError.

        Args:
            path: Path of the file that failed to parse.
            hint: Remediation hint appended to the message.
            cause: Validation error text.
        """
        msg = f"Failed to parse {str(path)!r} contents."
        if hint:
            msg = f"{msg} {hint}"
        details: dict[str, str] = {}
        if cause:
            details["cause"] = cause
        super().__init__(msg, details=details)
        self.path = Path(path)
        self.hint = hint
        self.cause = cause


class CompileError(ScarbArtifactsError):
    """The bytecode producer failed to compile a Sierra file to CASM.

    The producer's diagnostic is kept verbatim in the message so the caller
    can surface it unchanged.

    Attributes:
        sierra_path: Sierra file that failed to compile.
        diagnostic: Diagnostic output of the producer.
    """

    def __init__(self, sierra_path: Path | str, diagnostic: str) -> None:
        """Initialize CompileError.

        Args:
            sierra_path: Sierra file that failed to compile.
            diagnostic: Diagnostic output of the producer.
        """
        super().__init__(
            f"Failed to compile {str(sierra_path)!r} to casm:\n{diagnostic}",
        )
        self.sierra_path = Path(sierra_path)
        self.diagnostic = diagnostic

        logger.error(
            "casm_compilation_failed",
            sierra_path=str(sierra_path),
            diagnostic=diagnostic,
        )


class AmbiguousVersionQueryError(ScarbArtifactsError):
    """A version query cannot be answered for a single package."""


class DuplicatePackageError(AmbiguousVersionQueryError):
    """Package name appears more than once among workspace packages."""

    def __init__(self, name: str) -> None:
        """Initialize DuplicatePackageError.

        Args:
            name: The duplicated package name.
        """
        super().__init__(
            f"Package {name} is duplicated in dependencies",
            details={"package": name},
        )
        self.name = name


class ScarbCommandError(ScarbArtifactsError):
    """Running the scarb binary failed.

    Attributes:
        command: The command line that was executed.
        stderr: Captured standard error, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        command: list[str],
        stderr: str | None = None,
    ) -> None:
        """Initialize ScarbCommandError.

        Args:
            message: Human-readable error description.
            command: The command line that was executed.
            stderr: Captured standard error, if any.
        """
        details = {"command": " ".join(command)}
        if stderr:
            details["stderr"] = stderr.strip()
        super().__init__(message, details=details)
        self.command = command
        self.stderr = stderr


class ConfigurationError(ScarbArtifactsError):
    """An environment variable holds an invalid setting.

    Attributes:
        variables: Names of the offending environment variables.
    """

    def __init__(self, variables: list[str], *, cause: str | None = None) -> None:
        """Initialize ConfigurationError.

        Args:
            variables: Names of the offending environment variables.
            cause: Validation error text.
        """
        details = {"variables": ", ".join(variables)}
        if cause:
            details["cause"] = cause
        super().__init__("Invalid scarb-artifacts settings in environment", details=details)
        self.variables = variables
