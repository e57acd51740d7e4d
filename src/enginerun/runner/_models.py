"""Data models for the runner.

This module defines the core data types for running the engine:
- RunState: Lifecycle states of a runner
- RunEventType: Types of lifecycle events
- RunEvent: Immutable event records
- RunStatus: Mutable runtime status
- DebugProfile: How the engine process is launched
"""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

DEFAULT_ARTIFACT_ARGUMENT = "--script-run={path}"


def render_artifact_argument(template: str, artifact_path: Path) -> str:
    """Render an artifact argument template.

    Args:
        template: Argument template. The only field it may use is `{path}`.
        artifact_path: Path substituted for `{path}`.

    Returns:
        The rendered argument.

    Raises:
        ValueError: If the template uses other fields or is malformed.
    """
    try:
        return template.format(path=artifact_path)
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
        msg = f"Invalid artifact argument template {template!r}: {e!r}"
        raise ValueError(msg) from e


class RunState(StrEnum):
    """Runner lifecycle states.

    - IDLE: No run requested, no process
    - PENDING: A delayed start was requested; no process has been spawned yet
    - RUNNING: The process has been launched and has not been confirmed dead
    """

    IDLE = "idle"
    PENDING = "pending"
    RUNNING = "running"


class RunEventType(StrEnum):
    """Types of runner lifecycle events.

    - PENDING: A delayed start was accepted
    - STARTED: The engine process has been spawned
    - STOP_REQUESTED: Termination of the live process was requested
    - CANCELLED: A pending delayed start was cancelled
    - EXITED: The engine process exited with status 0
    - CRASHED: The engine process exited abnormally
    - LAUNCH_FAILED: The engine process could not be spawned
    """

    PENDING = "pending"
    STARTED = "started"
    STOP_REQUESTED = "stop_requested"
    CANCELLED = "cancelled"
    EXITED = "exited"
    CRASHED = "crashed"
    LAUNCH_FAILED = "launch_failed"


@dataclass(frozen=True, slots=True)
class RunEvent:
    """Immutable runner lifecycle event.

    Attributes:
        event_type: Type of lifecycle event.
        timestamp: ISO 8601 formatted timestamp.
        pid: Process ID if applicable.
        exit_code: Exit code if the process terminated.
        message: Optional human-readable message.
    """

    event_type: RunEventType
    timestamp: str
    pid: int | None = None
    exit_code: int | None = None
    message: str | None = None


@dataclass(slots=True)
class RunStatus:
    """Mutable runtime status of a runner.

    Attributes:
        pid: Process ID of the live engine process, if any.
        last_exit_code: Exit code from the last process termination. Negative
            values are the signal number that killed the process.
        started_at: ISO 8601 timestamp of the last launch.
        stopped_at: ISO 8601 timestamp of the last exit.
    """

    pid: int | None = None
    last_exit_code: int | None = None
    started_at: str | None = None
    stopped_at: str | None = None


@dataclass(frozen=True, slots=True)
class DebugProfile:
    """Launch configuration for the engine process.

    Treated as inert data by the runner: it is only read when a process is
    actually spawned.

    Attributes:
        executable: Program to run.
        arguments: Arguments placed before the startup artifact argument.
        cwd: Working directory for the process. Inherited if None.
        env: Environment overrides merged over the inherited environment.
        script_text: Profile script appended to the startup instruction.
        artifact_argument: Template for the argument that points the engine
            at the startup artifact. ``{path}`` is replaced by its path.
        description: Human-readable description.
    """

    executable: str
    arguments: tuple[str, ...] = ()
    cwd: Path | None = None
    env: dict[str, str] = field(default_factory=dict)
    script_text: str = ""
    artifact_argument: str = DEFAULT_ARTIFACT_ARGUMENT
    description: str = ""

    def __post_init__(self) -> None:
        _ = render_artifact_argument(self.artifact_argument, Path("startup.txt"))

    def build_command(self, artifact_path: Path) -> tuple[str, ...]:
        """Build the full command line for one run.

        Args:
            artifact_path: Path of the startup artifact for this run.

        Returns:
            The executable followed by all arguments.

        Raises:
            ValueError: If the artifact argument template is invalid.
        """
        artifact_arg = render_artifact_argument(self.artifact_argument, artifact_path)
        return (self.executable, *self.arguments, artifact_arg)

    def compose_instruction(self, startup_instruction: str) -> str:
        """Combine the startup instruction with the profile script.

        Args:
            startup_instruction: Instruction supplied with the profile.

        Returns:
            The text written into the startup artifact.
        """
        if startup_instruction and self.script_text:
            return f"{startup_instruction}\n{self.script_text}"
        return startup_instruction or self.script_text
