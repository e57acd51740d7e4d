"""Save operations that report their completion.

The editor's document pipeline is not part of this package. SaveOperation
wraps an arbitrary async job so that it can drive a SaveWatcher: the job
runs once and the ``done`` signal reports ``(kind, failed)``.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, final

import anyio
import structlog

from ._signal import Signal

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from structlog.typing import FilteringBoundLogger

_logger = structlog.get_logger(__name__)


class OperationKind(IntEnum):
    """Document operation type codes."""

    SAVE = 1
    VERIFY = 2
    SEARCH = 3
    MERGE = 4
    LOAD = 5


@final
class SaveOperation:
    """A one-shot async job with a completion signal.

    Attributes:
        done: Emitted once with ``(kind, failed)`` when the job has ended.
    """

    __slots__ = ("_failed", "_job", "_kind", "_logger", "_ran", "done")

    def __init__(
        self,
        job: Callable[[], Awaitable[object]],
        *,
        kind: int = OperationKind.SAVE,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the operation.

        Args:
            job: Async callable performing the work. Raising any exception
                marks the operation as failed.
            kind: Operation type code reported with completion.
            logger: Logger for job failures. Uses the module logger if None.
        """
        self._job = job
        self._kind = int(kind)
        self._logger: FilteringBoundLogger = logger or _logger
        self._ran = False
        self._failed = False
        self.done: Signal[[int, bool]] = Signal("operation.done")

    @property
    def kind(self) -> int:
        """Return the operation type code."""
        return self._kind

    @property
    def ran(self) -> bool:
        """Return True once run() has been called."""
        return self._ran

    @property
    def failed(self) -> bool:
        """Return True if the job ended with an error."""
        return self._failed

    async def run(self) -> bool:
        """Run the job and report completion.

        Returns:
            True if the job succeeded, False if it raised.

        Raises:
            RuntimeError: If the operation has already run.
        """
        if self._ran:
            msg = "Operation has already run"
            raise RuntimeError(msg)

        self._ran = True
        try:
            _ = await self._job()
        except anyio.get_cancelled_exc_class():
            # A cancelled save leaves the files in an unknown state
            self._failed = True
            self.done.emit(self._kind, self._failed)
            raise
        except Exception:
            self._logger.exception("operation_failed", kind=self._kind)
            self._failed = True

        self.done.emit(self._kind, self._failed)
        return not self._failed
