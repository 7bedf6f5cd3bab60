"""Runner for the scarb binary.

This module provides:
- ScarbCommand: run scarb in a workspace and capture its output
- ScarbVersionInfo: versions reported by `scarb --version`
"""

from __future__ import annotations

import os
import re
import subprocess
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from scarb_artifacts.config import ResolverSettings
from scarb_artifacts.errors import ParseError, ScarbCommandError
from scarb_artifacts.metadata import METADATA_FORMAT_VERSION, WorkspaceMetadata
from scarb_artifacts.observability import get_logger

_SCARB_VERSION_RE = re.compile(r"^scarb (?P<version>\S+)", re.MULTILINE)
_CAIRO_VERSION_RE = re.compile(r"^cairo: (?P<version>\S+)", re.MULTILINE)
_SIERRA_VERSION_RE = re.compile(r"^sierra: (?P<version>\S+)", re.MULTILINE)


class ScarbVersionInfo(BaseModel):
    """Tool versions reported by `scarb --version`.

    Example:
        >>> ScarbVersionInfo.parse("scarb 2.8.3 (54938ce3b 2024-09-26)\\ncairo: 2.8.2\\nsierra: 1.6.0")
        ScarbVersionInfo(scarb='2.8.3', cairo='2.8.2', sierra='1.6.0')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    scarb: str = Field(..., min_length=1, description="Scarb version")
    cairo: str = Field(..., min_length=1, description="Cairo compiler version")
    sierra: str | None = Field(default=None, description="Sierra version")

    @classmethod
    def parse(cls, output: str) -> ScarbVersionInfo:
        """Parse `scarb --version` output.

        Raises:
            ParseError: If the scarb or cairo version line is missing.
        """
        scarb = _SCARB_VERSION_RE.search(output)
        cairo = _CAIRO_VERSION_RE.search(output)
        if scarb is None or cairo is None:
            raise ParseError("scarb --version", hint=None, cause=output.strip())
        sierra = _SIERRA_VERSION_RE.search(output)
        return cls(
            scarb=scarb.group("version"),
            cairo=cairo.group("version"),
            sierra=sierra.group("version") if sierra else None,
        )


class ScarbCommand:
    """Run the scarb binary in a workspace.

    Attributes:
        scarb_path: Scarb executable name or path.
        current_dir: Working directory of the process.
        manifest_path: Explicit Scarb.toml passed via --manifest-path.

    Example:
        >>> command = ScarbCommand(current_dir=Path("my_project"))
        >>> metadata = command.metadata()
        >>> command.version().scarb
        '2.8.3'
    """

    def __init__(
        self,
        *,
        scarb_path: str | None = None,
        current_dir: Path | str | None = None,
        manifest_path: Path | str | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        """Initialize ScarbCommand.

        Args:
            scarb_path: Scarb executable. Defaults to ResolverSettings.from_env().
            current_dir: Working directory for the scarb process.
            manifest_path: Path to Scarb.toml, passed as --manifest-path.
            env: Extra environment variables for the process.
        """
        self.scarb_path = scarb_path or ResolverSettings.from_env().scarb_path
        self.current_dir = Path(current_dir) if current_dir is not None else None
        self.manifest_path = Path(manifest_path) if manifest_path is not None else None
        self.env = env
        self._log = get_logger(scarb=self.scarb_path)

    def command_line(self, *args: str) -> list[str]:
        """Build the full command line for the given scarb arguments."""
        command = [self.scarb_path]
        if self.manifest_path is not None:
            command += ["--manifest-path", str(self.manifest_path)]
        return [*command, *args]

    def run(self, *args: str) -> str:
        """Run scarb and return its standard output.

        Raises:
            ScarbCommandError: If scarb cannot be started or exits non-zero.
        """
        command = self.command_line(*args)
        self._log.debug("scarb_command_started", command=command)

        env = {**os.environ, **self.env} if self.env else None

        try:
            result = subprocess.run(
                command,
                cwd=self.current_dir,
                env=env,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise ScarbCommandError(
                f"Failed to run {self.scarb_path}", command=command, stderr=str(e)
            ) from e

        if result.returncode != 0:
            raise ScarbCommandError(
                f"scarb exited with code {result.returncode}",
                command=command,
                stderr=result.stderr or result.stdout,
            )
        return result.stdout

    def metadata(self, *, no_deps: bool = False) -> WorkspaceMetadata:
        """Run `scarb metadata` and parse its output.

        Args:
            no_deps: Only describe workspace members, not dependencies.

        Raises:
            ScarbCommandError: If scarb fails.
            ParseError: If no metadata document is found in the output.
        """
        args = ["--json", "metadata", "--format-version", str(METADATA_FORMAT_VERSION)]
        if no_deps:
            args.append("--no-deps")
        output = self.run(*args)

        # With --json, scarb may print diagnostics as separate JSON lines before
        # the metadata document; the document is the last object line
        documents = [line for line in output.splitlines() if line.startswith("{")]
        if not documents:
            raise ParseError("scarb metadata", hint=None, cause=output.strip() or "empty output")
        return WorkspaceMetadata.from_json(documents[-1], source="scarb metadata")

    def version(self) -> ScarbVersionInfo:
        """Run `scarb --version` and parse the reported versions."""
        return ScarbVersionInfo.parse(self.run("--version"))
