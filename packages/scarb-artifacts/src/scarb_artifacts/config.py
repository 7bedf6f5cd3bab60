"""Pydantic configuration models for scarb-artifacts.

This module provides:
- ResolverSettings: binary locations, build profile and parallelism
- Environment variable names read by ResolverSettings.from_env()
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from scarb_artifacts.errors import ConfigurationError

# Environment variables read by ResolverSettings.from_env()
SCARB_ENV_VAR = "SCARB"
COMPILER_ENV_VAR = "UNIVERSAL_SIERRA_COMPILER"
PROFILE_ENV_VAR = "SCARB_PROFILE"
MAX_WORKERS_ENV_VAR = "SCARB_ARTIFACTS_MAX_WORKERS"

# Field name -> environment variable
ENV_VARS = {
    "scarb_path": SCARB_ENV_VAR,
    "compiler_path": COMPILER_ENV_VAR,
    "profile": PROFILE_ENV_VAR,
    "max_workers": MAX_WORKERS_ENV_VAR,
}

DEFAULT_SCARB_PATH = "scarb"
DEFAULT_COMPILER_PATH = "universal-sierra-compiler"
DEFAULT_PROFILE = "dev"


class ResolverSettings(BaseModel):
    """Settings for artifact resolution.

    Attributes:
        scarb_path: Scarb executable name or path.
        compiler_path: universal-sierra-compiler executable name or path.
        profile: Build profile whose target directory holds the manifests.
        max_workers: Threads used to materialize contracts of one manifest
            (1 = sequential).
        compiler_timeout_seconds: Timeout for one compiler invocation
            (None = no timeout).

    Example:
        >>> settings = ResolverSettings(profile="release", max_workers=4)
        >>> settings.max_workers
        4
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    scarb_path: str = Field(
        default=DEFAULT_SCARB_PATH,
        min_length=1,
        description="Scarb executable name or path",
    )
    compiler_path: str = Field(
        default=DEFAULT_COMPILER_PATH,
        min_length=1,
        description="universal-sierra-compiler executable name or path",
    )
    profile: str = Field(
        default=DEFAULT_PROFILE,
        min_length=1,
        description="Build profile directory under the workspace target directory",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Threads used to materialize contracts of one manifest",
    )
    compiler_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Timeout for one compiler invocation in seconds",
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ResolverSettings:
        """Build settings from environment variables.

        Unset variables fall back to the field defaults.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Raises:
            ConfigurationError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for field_name, var in ENV_VARS.items():
            if env.get(var):
                values[field_name] = env[var]
        try:
            return cls.model_validate(values)
        except PydanticValidationError as e:
            fields = [str(error["loc"][0]) for error in e.errors() if error["loc"]]
            variables = [ENV_VARS.get(field, field) for field in fields]
            raise ConfigurationError(variables, cause=str(e)) from e
