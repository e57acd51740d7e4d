"""Runner package for launching the engine from the editor.

This package supervises one external engine process at a time, captures
its combined output into an append-only log, and coordinates launches
with asynchronous save operations so that the engine never starts
against files that are still being written.

Key Components:
    - DebugProfile: How the engine process is launched
    - RunState: Lifecycle state enumeration
    - RunStatus: Runtime status tracking
    - RunEvent: Lifecycle event records
    - RunLog: Append-only log of captured output
    - StartupArtifact: Transient file carrying the startup instruction
    - Runner: Single engine process supervisor
    - SaveOperation: Async job with a completion signal
    - SaveWatcher: Starts or stops a runner when a save completes
    - Signal / Subscription: Notification dispatch
    - LogSink / ConsoleLogSink: Output display

Example:
    >>> from enginerun.runner import DebugProfile, Runner, SaveOperation, SaveWatcher
    >>> async with Runner() as runner:
    ...     runner.configure(DebugProfile(executable="openmw"), "player->additem gold_001 100")
    ...     runner.start(delayed=True)
    ...     save = SaveOperation(write_project)
    ...     watcher = SaveWatcher(runner, save)
    ...     await save.run()  # launches the engine once the save succeeded
    ...     await runner.wait_idle()
"""

from ._artifact import StartupArtifact
from ._log import RunLog
from ._models import (
    DebugProfile,
    RunEvent,
    RunEventType,
    RunState,
    RunStatus,
)
from ._operation import OperationKind, SaveOperation
from ._output import ConsoleLogSink
from ._protocol import CompletionSource, LogSink
from ._runner import Runner, describe_exit
from ._signal import Signal, Subscription
from ._watcher import SaveWatcher

__all__ = [
    "CompletionSource",
    "ConsoleLogSink",
    "DebugProfile",
    "LogSink",
    "OperationKind",
    "RunEvent",
    "RunEventType",
    "RunLog",
    "RunState",
    "RunStatus",
    "Runner",
    "SaveOperation",
    "SaveWatcher",
    "Signal",
    "StartupArtifact",
    "Subscription",
    "describe_exit",
]
