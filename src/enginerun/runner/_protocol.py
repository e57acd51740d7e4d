"""Protocol definitions for the runner.

This module defines the interfaces that decouple the runner from its
collaborators:
- LogSink: Protocol for displaying captured output and lifecycle events
- CompletionSource: Protocol for an operation that reports its completion
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ._models import RunEvent
    from ._signal import Signal


@runtime_checkable
class LogSink(Protocol):
    """Protocol for consuming runner output.

    Sinks receive output chunks exactly as they were appended to the run
    log, plus lifecycle events. Both calls happen on the event loop thread
    and must not block.
    """

    def write_chunk(self, text: str) -> None:
        """Write a chunk of captured output.

        Args:
            text: Decoded output; may contain several lines or a partial one.
        """
        ...

    def write_event(self, event: RunEvent) -> None:
        """Write a runner lifecycle event.

        Args:
            event: The lifecycle event to record.
        """
        ...


@runtime_checkable
class CompletionSource(Protocol):
    """Protocol for an operation whose completion gates a run.

    The ``done`` signal is emitted with ``(kind, failed)`` once the
    operation has finished.
    """

    @property
    def kind(self) -> int:
        """Return the operation type code."""
        ...

    @property
    def done(self) -> Signal[[int, bool]]:
        """Return the completion signal."""
        ...
