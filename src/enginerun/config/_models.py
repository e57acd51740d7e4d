"""Configuration models.

This module provides the Pydantic models for the enginerun configuration
file: logging settings, runner settings and named debug profiles.
"""

from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from enginerun.exceptions import ConfigLoadError, ProfileNotFoundError
from enginerun.runner import DebugProfile
from enginerun.runner._models import (
    DEFAULT_ARTIFACT_ARGUMENT,
    render_artifact_argument,
)
from enginerun.runner._runner import DEFAULT_SHUTDOWN_TIMEOUT


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty writes to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    file: str = ""


class RunnerConfig(BaseModel):
    """Runner configuration section.

    Attributes:
        shutdown_timeout: Seconds between the termination request and kill.
        clear_log_on_start: Whether each launch starts with an empty log.
        artifact_dir: Directory for startup artifacts (empty uses the
            system temporary directory).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    shutdown_timeout: float = Field(default=DEFAULT_SHUTDOWN_TIMEOUT, gt=0)
    clear_log_on_start: bool = True
    artifact_dir: str = ""

    @property
    def artifact_path(self) -> Path | None:
        """Return the artifact directory as a path, or None for the default."""
        return Path(self.artifact_dir).expanduser() if self.artifact_dir else None


class ProfileConfig(BaseModel):
    """A named debug profile.

    Attributes:
        executable: Program to run.
        arguments: Arguments placed before the startup artifact argument.
        cwd: Working directory (empty inherits the current one).
        env: Environment overrides.
        script_text: Script appended to the startup instruction.
        artifact_argument: Template for the startup artifact argument.
        description: Human-readable description.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    executable: str = Field(min_length=1)
    arguments: tuple[str, ...] = ()
    cwd: str = ""
    env: dict[str, str] = Field(default_factory=dict)
    script_text: str = ""
    artifact_argument: str = DEFAULT_ARTIFACT_ARGUMENT
    description: str = ""

    @field_validator("artifact_argument")
    @classmethod
    def check_artifact_argument(cls, value: str) -> str:
        """Reject templates that use fields other than {path}."""
        _ = render_artifact_argument(value, Path("startup.txt"))
        return value

    def to_profile(self) -> DebugProfile:
        """Convert to the runner's DebugProfile."""
        return DebugProfile(
            executable=self.executable,
            arguments=self.arguments,
            cwd=Path(self.cwd).expanduser() if self.cwd else None,
            env=dict(self.env),
            script_text=self.script_text,
            artifact_argument=self.artifact_argument,
            description=self.description,
        )


class Config(BaseModel):
    """Top-level configuration.

    Use ``from_dict`` or ``enginerun.config.load_config`` rather than the
    constructor so that validation errors are reported as ConfigLoadError.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    profiles: dict[str, ProfileConfig] = Field(default_factory=dict)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],  # pyright: ignore[reportExplicitAny]
        *,
        path: Path | None = None,
    ) -> Self:
        """Validate configuration data.

        Args:
            data: Parsed configuration values.
            path: File the values came from, for error reporting.

        Returns:
            The validated configuration.

        Raises:
            ConfigLoadError: If the data fails validation.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            msg = f"Invalid configuration at '{location}': {first['msg']}"
            raise ConfigLoadError(msg, path=path) from e

    def get_profile(self, name: str) -> DebugProfile:
        """Get a debug profile by name.

        Args:
            name: The profile name.

        Returns:
            The DebugProfile for the named profile.

        Raises:
            ProfileNotFoundError: If no profile exists with that name.
        """
        profile = self.profiles.get(name)
        if profile is None:
            msg = f"Profile '{name}' not found"
            raise ProfileNotFoundError(msg, profile_name=name)
        return profile.to_profile()
