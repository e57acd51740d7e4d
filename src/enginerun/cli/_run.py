"""Async entry point for the run command.

Runs one engine session: an optional save command gates a delayed start
through a SaveWatcher, output is shown on the console, and SIGINT/SIGTERM
stop the engine gracefully.
"""

from __future__ import annotations

import shlex
import signal
from typing import TYPE_CHECKING

import anyio
import anyio.abc
from rich.console import Console

from enginerun.exceptions import RunnerError
from enginerun.runner import (
    ConsoleLogSink,
    OperationKind,
    Runner,
    SaveOperation,
    SaveWatcher,
)

from ._exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_RUN_FAILED,
    EXIT_SUCCESS,
    SIGNAL_EXIT_BASE,
)

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from enginerun.config import RunnerConfig
    from enginerun.runner import DebugProfile


def exit_code_for(last_exit_code: int | None) -> int:
    """Map the engine's return code to the command's exit code.

    Args:
        last_exit_code: Return code of the last run, None if nothing ran.

    Returns:
        The process exit code for the CLI.
    """
    if last_exit_code is None:
        return EXIT_RUN_FAILED
    if last_exit_code < 0:
        return SIGNAL_EXIT_BASE - last_exit_code
    return last_exit_code or EXIT_SUCCESS


async def _stop_on_signal(
    runner: Runner,
    watcher: SaveWatcher | None = None,
    *,
    task_status: anyio.abc.TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
) -> None:
    with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
        task_status.started()
        async for _ in signals:
            # A save finishing after Ctrl-C must not launch the engine
            if watcher is not None:
                watcher.detach()
            runner.stop()


async def _run_save_command(command: str) -> None:
    # Inherit stdout/stderr so the save output shows up on the terminal
    _ = await anyio.run_process(shlex.split(command), stdout=None, stderr=None)


async def run_engine(  # noqa: PLR0913
    profile: DebugProfile,
    instruction: str,
    *,
    settings: RunnerConfig,
    logger: FilteringBoundLogger,
    save_command: str | None = None,
    console: Console | None = None,
) -> int:
    """Run the engine once and wait for it to exit.

    Args:
        profile: How to launch the engine.
        instruction: Startup instruction for the engine.
        settings: Runner settings from the configuration.
        logger: Logger for lifecycle records.
        save_command: Command that must succeed before the engine starts.
        console: Console for engine output. Creates one if None.

    Returns:
        The exit code for the CLI.
    """
    sink = ConsoleLogSink(console or Console(), label=profile.executable)

    async with Runner(
        shutdown_timeout=settings.shutdown_timeout,
        clear_log_on_start=settings.clear_log_on_start,
        artifact_dir=settings.artifact_path,
        logger=logger,
    ) as runner:
        subscriptions = sink.attach(runner)
        runner.configure(profile, instruction)

        try:
            runner.start(delayed=bool(save_command))
        except RunnerError as e:
            logger.error("run_not_started", error=str(e))
            return EXIT_CONFIG_ERROR

        operation: SaveOperation | None = None
        watcher: SaveWatcher | None = None
        if save_command:
            operation = SaveOperation(
                lambda: _run_save_command(save_command),
                kind=OperationKind.SAVE,
                logger=logger,
            )
            watcher = SaveWatcher(runner, operation, logger=logger)

        save_failed = False
        async with anyio.create_task_group() as tg:
            await tg.start(_stop_on_signal, runner, watcher)

            if operation is not None:
                save_failed = not await operation.run()

            await runner.wait_idle()
            tg.cancel_scope.cancel()

        for subscription in subscriptions:
            subscription.unsubscribe()

    if save_failed:
        return EXIT_RUN_FAILED
    return exit_code_for(runner.status.last_exit_code)
