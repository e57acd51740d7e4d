"""Console rendering of the run log.

This module provides the ConsoleLogSink, a LogSink that prints captured
engine output and runner lifecycle events with rich.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, final

from rich.console import Console
from rich.text import Text

from ._models import RunEventType

if TYPE_CHECKING:
    from ._models import RunEvent
    from ._runner import Runner
    from ._signal import Subscription

# (phrase, rich style) per lifecycle event
_EVENT_FORMATS: dict[RunEventType, tuple[str, str]] = {
    RunEventType.PENDING: ("waiting for save", "cyan"),
    RunEventType.STARTED: ("started", "bold green"),
    RunEventType.STOP_REQUESTED: ("stopping", "dim yellow"),
    RunEventType.CANCELLED: ("launch cancelled", "dim magenta"),
    RunEventType.EXITED: ("exited", "yellow"),
    RunEventType.CRASHED: ("crashed", "bold red"),
    RunEventType.LAUNCH_FAILED: ("failed to launch", "bold red"),
}


@final
class ConsoleLogSink:
    """Log sink that writes to a rich Console.

    Output chunks are printed verbatim, without added newlines, so the
    console shows the same text as the run log. Each event is printed as
    one line, ``label> phrase [pid N, code N]: message``.
    """

    __slots__ = ("_console", "_label")

    def __init__(self, console: Console | None = None, *, label: str = "engine") -> None:
        """Initialize the sink.

        Args:
            console: Rich Console instance for output. If None, creates a new one.
            label: Prefix shown in front of lifecycle events.
        """
        self._console = console or Console()
        self._label = label

    def attach(
        self, runner: Runner
    ) -> tuple[Subscription[[str]], Subscription[[RunEvent]]]:
        """Subscribe to a runner's log and lifecycle events.

        Args:
            runner: The runner to display.

        Returns:
            The subscriptions, for the caller to unsubscribe when done.
        """
        return (
            runner.log.appended.connect(self.write_chunk),
            runner.events.connect(self.write_event),
        )

    def write_chunk(self, text: str) -> None:
        """Write a chunk of captured output."""
        self._console.print(Text(text), end="", soft_wrap=True, highlight=False)

    def write_event(self, event: RunEvent) -> None:
        """Write a lifecycle event on its own line."""
        phrase, style = _EVENT_FORMATS.get(event.event_type, (event.event_type.value, ""))

        details = [
            *([f"pid {event.pid}"] if event.pid is not None else []),
            *([f"code {event.exit_code}"] if event.exit_code is not None else []),
        ]
        line = Text.assemble((f"{self._label}> ", "bold blue"), (phrase, style))
        if details:
            _ = line.append(f" [{', '.join(details)}]", style="dim")
        if event.message:
            _ = line.append(f": {event.message}")

        self._console.print(line, soft_wrap=True, highlight=False)
