"""enginerun exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class EngineRunError(Exception):
    """Base exception for enginerun errors."""


# =============================================================================
# Runner Exceptions
# =============================================================================


class RunnerError(EngineRunError):
    """Base exception for runner errors."""


class RunnerBusyError(RunnerError):
    """Raised when an operation requires an idle runner.

    Attributes:
        state: The runner state at the time of the call.
    """

    def __init__(self, message: str, *, state: str | None = None) -> None:
        """Initialize with error message and runner state.

        Args:
            message: Human-readable error message.
            state: The runner state at the time of the call.
        """
        super().__init__(message)
        self.state: str | None = state


class RunnerNotConfiguredError(RunnerError):
    """Raised when a run is requested before a profile has been configured."""


class StartupArtifactError(RunnerError):
    """Raised when the startup artifact cannot be created or written.

    Attributes:
        directory: The directory the artifact was to be created in.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        directory: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and artifact context.

        Args:
            message: Human-readable error message.
            directory: The directory the artifact was to be created in.
            cause: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.directory: Path | None = directory
        self.cause: Exception | None = cause


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(EngineRunError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ProfileNotFoundError(ConfigError, KeyError):
    """Raised when a debug profile cannot be found by name.

    Attributes:
        profile_name: The name of the profile that was not found.
    """

    def __init__(self, message: str, *, profile_name: str | None = None) -> None:
        """Initialize with error message and profile context.

        Args:
            message: Human-readable error message.
            profile_name: The name of the profile that was not found.
        """
        super().__init__(message)
        self.profile_name: str | None = profile_name
