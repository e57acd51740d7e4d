"""Runner for the engine process.

This module provides the Runner class that launches the engine process
from a debug profile, captures its merged output into a RunLog and tracks
the run state across delayed starts and asynchronous process exits.
"""

from __future__ import annotations

import contextlib
import os
import signal
import subprocess
from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, Self, final

import anyio
import anyio.abc
import structlog
from anyio.streams.text import TextReceiveStream

from enginerun.exceptions import (
    RunnerBusyError,
    RunnerError,
    RunnerNotConfiguredError,
)

from ._artifact import StartupArtifact
from ._log import RunLog
from ._models import RunEvent, RunEventType, RunState, RunStatus
from ._signal import Signal

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

    from structlog.typing import FilteringBoundLogger

    from ._models import DebugProfile

DEFAULT_SHUTDOWN_TIMEOUT: float = 5.0
OUTPUT_DRAIN_TIMEOUT: float = 0.5
EXIT_POLL_INTERVAL: float = 0.25


def _get_timestamp() -> str:
    """Get current timestamp in ISO 8601 format."""
    import pendulum  # noqa: PLC0415

    return pendulum.now("UTC").to_iso8601_string()


async def _wait_for_exit(process: anyio.abc.Process) -> int:
    """Wait for the process to exit and return its code.

    On asyncio, ``Process.wait()`` only returns once every pipe has
    been closed, which a descendant inheriting stdout can postpone
    indefinitely. The return code is set as soon as the process is reaped.
    """
    while True:
        with anyio.move_on_after(EXIT_POLL_INTERVAL):
            return await process.wait()
        if process.returncode is not None:
            return process.returncode


def describe_exit(exit_code: int) -> str:
    """Describe an abnormal exit status for the run log.

    Args:
        exit_code: Process return code. Negative values are signal numbers.

    Returns:
        A one-line diagnostic.
    """
    if exit_code < 0:
        try:
            name = signal.Signals(-exit_code).name
        except ValueError:
            name = str(-exit_code)
        return f"Engine terminated by signal {name}"
    return f"Engine exited with code {exit_code}"


@final
class Runner:
    """Supervises one engine process at a time.

    The runner is an async context manager: entering it opens the task
    group in which processes are supervised, leaving it stops any live
    process and waits for its exit. All public operations are synchronous
    and must be called from the event loop that entered the runner, which
    serializes them with the exit and output reactions.

    ``is_running()`` reports a run that has been requested and not yet
    fully ended. That includes a delayed start whose process has not been
    spawned; use ``state`` or ``is_process_alive()`` to tell them apart.

    Attributes:
        status: Mutable runtime status of the current or last run.
        run_state_changed: Emitted after every state transition.
        events: Emitted with a RunEvent for every lifecycle event.
    """

    __slots__ = (
        "_artifact",
        "_artifact_dir",
        "_clear_log_on_start",
        "_exit_stack",
        "_idle_waiters",
        "_log",
        "_logger",
        "_process",
        "_profile",
        "_shutdown_timeout",
        "_startup_instruction",
        "_state",
        "_stop_requested",
        "_task_group",
        "events",
        "run_state_changed",
        "status",
    )

    def __init__(
        self,
        *,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
        clear_log_on_start: bool = True,
        artifact_dir: Path | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            shutdown_timeout: Seconds to wait after a graceful termination
                request before the process is killed.
            clear_log_on_start: Whether each launch starts with an empty log.
            artifact_dir: Directory for startup artifacts. Uses the system
                temporary directory if None.
            logger: Logger for lifecycle records. Uses structlog's default
                logger if None.
        """
        self._shutdown_timeout = shutdown_timeout
        self._clear_log_on_start = clear_log_on_start
        self._artifact_dir = artifact_dir
        self._logger: FilteringBoundLogger = logger or structlog.get_logger(__name__)

        self._profile: DebugProfile | None = None
        self._startup_instruction = ""
        self._state = RunState.IDLE
        self._artifact: StartupArtifact | None = None
        self._process: anyio.abc.Process | None = None
        self._stop_requested: anyio.Event | None = None
        self._idle_waiters: list[anyio.Event] = []
        self._log = RunLog()

        self._exit_stack: AsyncExitStack | None = None
        self._task_group: anyio.abc.TaskGroup | None = None

        self.status = RunStatus()
        self.run_state_changed: Signal[[]] = Signal("run_state_changed")
        self.events: Signal[[RunEvent]] = Signal("events")

    async def __aenter__(self) -> Self:
        if self._exit_stack is not None:
            msg = "Runner is already active"
            raise RunnerError(msg)
        async with AsyncExitStack() as stack:
            self._task_group = await stack.enter_async_context(
                anyio.create_task_group()
            )
            self._exit_stack = stack.pop_all()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        exit_stack, self._exit_stack = self._exit_stack, None

        # Teardown must finish even when the surrounding scope is cancelled
        with anyio.CancelScope(shield=True):
            self.stop()
            await self.wait_idle()

        self._task_group = None
        if exit_stack is None:
            return None
        return await exit_stack.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def state(self) -> RunState:
        """Return the current run state."""
        return self._state

    @property
    def profile(self) -> DebugProfile | None:
        """Return the configured debug profile."""
        return self._profile

    @property
    def startup_instruction(self) -> str:
        """Return the configured startup instruction."""
        return self._startup_instruction

    @property
    def log(self) -> RunLog:
        """Return the log of captured output."""
        return self._log

    @property
    def pid(self) -> int | None:
        """Return the process ID if a process is live, None otherwise."""
        return self.status.pid

    @property
    def artifact_path(self) -> Path | None:
        """Return the path of the current startup artifact, if any."""
        if self._artifact is None or self._artifact.removed:
            return None
        return self._artifact.path

    def is_running(self) -> bool:
        """Check whether a run has been requested and has not yet ended."""
        return self._state is not RunState.IDLE

    def is_process_alive(self) -> bool:
        """Check whether an engine process is currently live."""
        return self._process is not None and self._process.returncode is None

    def configure(self, profile: DebugProfile, startup_instruction: str = "") -> None:
        """Replace the launch configuration.

        Args:
            profile: How to launch the engine.
            startup_instruction: Text written to the startup artifact.

        Raises:
            RunnerBusyError: If a run is pending or in progress.
        """
        if self._state is not RunState.IDLE:
            msg = f"Cannot configure the runner while it is {self._state.value}"
            raise RunnerBusyError(msg, state=self._state.value)

        self._profile = profile
        self._startup_instruction = startup_instruction

    def start(self, *, delayed: bool = False) -> None:
        """Start a run.

        Starting while running is a no-op, as is a delayed start while a
        delayed start is already pending. A non-delayed start promotes a
        pending delayed start to a real launch.

        Args:
            delayed: Flag the runner as running without launching the
                process yet. A later ``start()`` performs the launch.

        Raises:
            RunnerError: If the runner is not active.
            RunnerNotConfiguredError: If no profile has been configured.
            StartupArtifactError: If the startup artifact cannot be written.
            ValueError: If the profile's artifact argument cannot be rendered.
        """
        if self._state is RunState.RUNNING:
            return

        if delayed:
            if self._state is RunState.IDLE:
                self._logger.debug("run_pending")
                self._emit_event(RunEventType.PENDING)
                self._transition(RunState.PENDING)
            return

        artifact: StartupArtifact | None = None
        try:
            task_group = self._require_task_group()
            profile = self._require_profile()
            artifact = StartupArtifact.create(
                profile.compose_instruction(self._startup_instruction),
                directory=self._artifact_dir,
            )
            command = profile.build_command(artifact.path)
        except (RunnerError, ValueError) as e:
            if artifact is not None:
                artifact.remove()
            self._logger.error("run_rejected", error=str(e))
            self._transition(RunState.IDLE)
            raise

        if self._clear_log_on_start:
            self._log.clear()

        self._artifact = artifact
        stop_requested = anyio.Event()
        self._stop_requested = stop_requested

        self.status.started_at = _get_timestamp()
        self._transition(RunState.RUNNING)
        task_group.start_soon(
            self._supervise,
            profile,
            command,
            stop_requested,
            name=f"enginerun:{profile.executable}",
        )

    def stop(self) -> None:
        """Stop the current run.

        A pending delayed start is cancelled at once. A live process is
        asked to terminate; the run ends when its exit is observed, so
        callers wait for ``run_state_changed`` or ``wait_idle()``.
        """
        if self._state is RunState.IDLE:
            return

        if self._state is RunState.PENDING:
            self._logger.debug("run_cancelled")
            self._emit_event(RunEventType.CANCELLED)
            self._transition(RunState.IDLE)
            return

        stop_requested = self._stop_requested
        if stop_requested is None or stop_requested.is_set():
            return

        self._logger.info("termination_requested", pid=self.status.pid)
        self._emit_event(RunEventType.STOP_REQUESTED)
        stop_requested.set()

    async def wait_idle(self) -> None:
        """Wait until the runner has returned to the idle state."""
        while self._state is not RunState.IDLE:
            waiter = anyio.Event()
            self._idle_waiters.append(waiter)
            await waiter.wait()

    def _require_task_group(self) -> anyio.abc.TaskGroup:
        if self._task_group is None:
            msg = "Runner is not active; enter it with 'async with' first"
            raise RunnerError(msg)
        return self._task_group

    def _require_profile(self) -> DebugProfile:
        if self._profile is None:
            msg = "No debug profile configured"
            raise RunnerNotConfiguredError(msg)
        return self._profile

    def _transition(self, state: RunState) -> None:
        if state is self._state:
            return

        self._state = state
        if state is RunState.IDLE:
            waiters, self._idle_waiters = self._idle_waiters, []
            for waiter in waiters:
                waiter.set()

        self.run_state_changed.emit()

    def _emit_event(
        self,
        event_type: RunEventType,
        *,
        message: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        event = RunEvent(
            event_type=event_type,
            timestamp=_get_timestamp(),
            pid=self.status.pid,
            exit_code=exit_code,
            message=message,
        )
        self.events.emit(event)

    async def _supervise(
        self,
        profile: DebugProfile,
        command: tuple[str, ...],
        stop_requested: anyio.Event,
    ) -> None:
        """Launch the process and wait for it to exit.

        Args:
            profile: Profile the command was built from.
            command: Full command line.
            stop_requested: Set when termination has been requested.
        """
        process: anyio.abc.Process | None = None
        exit_code: int | None = None
        try:
            if stop_requested.is_set():
                # Stopped before the launch got scheduled
                return

            env: dict[str, str] | None = None
            if profile.env:
                env = {**os.environ, **profile.env}

            try:
                process = await anyio.open_process(
                    command,
                    cwd=profile.cwd,
                    env=env,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                )
            except (OSError, ValueError) as e:
                # ValueError covers arguments the OS cannot accept (NUL bytes)
                message = f"Failed to launch {profile.executable}: {e}"
                self._log.append_line(message)
                self._logger.warning("launch_failed", command=command, error=str(e))
                self._emit_event(RunEventType.LAUNCH_FAILED, message=message)
                return

            self._process = process
            self.status.pid = process.pid
            self._logger.info("run_started", pid=process.pid, command=command)
            self._emit_event(
                RunEventType.STARTED,
                message=f"Started with command: {' '.join(command)}",
            )

            async with anyio.create_task_group() as tg:
                tg.start_soon(self._terminate_when_requested, process, stop_requested)
                if process.stdout is not None:
                    tg.start_soon(self._drain_output, process.stdout)

                exit_code = await _wait_for_exit(process)
                # Releases the terminator task
                stop_requested.set()
                # Descendants may keep the pipe open after the engine exited
                tg.cancel_scope.deadline = anyio.current_time() + OUTPUT_DRAIN_TIMEOUT

        finally:
            if process is not None:
                with anyio.CancelScope(shield=True):
                    if process.returncode is None:
                        with contextlib.suppress(ProcessLookupError):
                            process.kill()
                    exit_code = await _wait_for_exit(process)
                    # aclose() would also wait for descendants holding the pipe
                    if process.stdout is not None:
                        await process.stdout.aclose()
            self._finish(exit_code)

    async def _terminate_when_requested(
        self,
        process: anyio.abc.Process,
        stop_requested: anyio.Event,
    ) -> None:
        await stop_requested.wait()
        if process.returncode is not None:
            return

        with contextlib.suppress(ProcessLookupError):
            process.terminate()

        with anyio.move_on_after(self._shutdown_timeout):
            _ = await _wait_for_exit(process)

        if process.returncode is None:
            self._logger.warning(
                "process_killed",
                pid=process.pid,
                timeout=self._shutdown_timeout,
            )
            with contextlib.suppress(ProcessLookupError):
                process.kill()

    async def _drain_output(self, stream: anyio.abc.ByteReceiveStream) -> None:
        try:
            async for chunk in TextReceiveStream(stream, errors="replace"):
                self._log.append(chunk)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            # Stream closed, which is expected on process exit
            pass

    def _finish(self, exit_code: int | None) -> None:
        """Complete a run once its process is gone.

        Args:
            exit_code: The process return code, or None if no process ran.
        """
        if self._artifact is not None:
            self._artifact.remove()
            self._artifact = None

        if exit_code is not None:
            self.status.last_exit_code = exit_code
            self.status.stopped_at = _get_timestamp()
            if exit_code == 0:
                self._emit_event(
                    RunEventType.EXITED,
                    exit_code=exit_code,
                    message="Exited normally",
                )
            else:
                message = describe_exit(exit_code)
                self._log.append_line(message)
                self._emit_event(
                    RunEventType.CRASHED,
                    exit_code=exit_code,
                    message=message,
                )
            self._logger.info("run_finished", pid=self.status.pid, exit_code=exit_code)

        self._process = None
        self._stop_requested = None
        self.status.pid = None
        self._transition(RunState.IDLE)
