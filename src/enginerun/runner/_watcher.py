"""Watch a save operation and start or stop the runner when it ends.

The editor must never launch the engine against files that are still
being written. A caller that wants to run right after saving requests a
delayed start and attaches a SaveWatcher to the save operation; the
watcher completes or cancels the run once the save has finished.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, final

import structlog

from enginerun.exceptions import RunnerError

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from ._protocol import CompletionSource
    from ._runner import Runner
    from ._signal import Subscription

_logger = structlog.get_logger(__name__)


@final
class SaveWatcher:
    """One-shot bridge from a save operation's completion to a runner.

    On successful completion the runner is started, which promotes a
    pending delayed start to a real launch. On failure the runner is
    stopped, which cancels the pending start. The watcher reacts to the
    first notification only and unsubscribes itself immediately.

    Only attach a watcher when a delayed start has been requested: on an
    idle runner a successful save launches the engine.
    """

    __slots__ = ("_fired", "_logger", "_runner", "_subscription")

    def __init__(
        self,
        runner: Runner,
        operation: CompletionSource,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Attach to a save operation.

        Args:
            runner: The runner to start or stop. Not owned by the watcher.
            operation: The operation whose completion is awaited.
            logger: Logger for reactions. Uses the module logger if None.
        """
        self._runner = runner
        self._logger: FilteringBoundLogger = logger or _logger
        self._fired = False
        self._subscription: Subscription[[int, bool]] | None = operation.done.connect(
            self._save_done
        )

    @property
    def fired(self) -> bool:
        """Return True once the watcher has reacted to a completion."""
        return self._fired

    @property
    def attached(self) -> bool:
        """Return True while the watcher is still subscribed."""
        return self._subscription is not None and self._subscription.active

    def detach(self) -> None:
        """Unsubscribe without reacting. Calling this more than once is harmless."""
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.unsubscribe()

    def _save_done(self, kind: int, failed: bool) -> None:  # noqa: FBT001
        if self._fired:
            return
        self._fired = True
        self.detach()

        if failed:
            self._logger.info("save_failed_stopping_runner", kind=kind)
            self._runner.stop()
        else:
            self._logger.debug("save_done_starting_runner", kind=kind)
            try:
                self._runner.start()
            except (RunnerError, ValueError):
                self._logger.exception("deferred_start_failed", kind=kind)
