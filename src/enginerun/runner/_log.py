"""Append-only log of captured engine output."""

from typing import final

from ._signal import Signal


@final
class RunLog:
    """Growing text document built from output chunks.

    Chunks are kept in arrival order. The runner only ever appends; the
    document is emptied solely through ``clear``.
    """

    __slots__ = ("_chunks", "appended", "cleared")

    def __init__(self) -> None:
        self._chunks: list[str] = []
        self.appended: Signal[[str]] = Signal("log.appended")
        self.cleared: Signal[[]] = Signal("log.cleared")

    def __len__(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)

    def __bool__(self) -> bool:
        return bool(self._chunks)

    @property
    def chunks(self) -> tuple[str, ...]:
        """Return the appended chunks in order."""
        return tuple(self._chunks)

    @property
    def text(self) -> str:
        """Return the whole document."""
        return "".join(self._chunks)

    def append(self, text: str) -> None:
        """Append a chunk of output.

        Args:
            text: Decoded output. Empty strings are ignored.
        """
        if not text:
            return
        self._chunks.append(text)
        self.appended.emit(text)

    def append_line(self, line: str) -> None:
        """Append a diagnostic line, starting a new line if needed.

        Args:
            line: The line to append, without trailing newline.
        """
        prefix = "\n" if self._chunks and not self._chunks[-1].endswith("\n") else ""
        self.append(f"{prefix}{line}\n")

    def clear(self) -> None:
        """Empty the document."""
        self._chunks.clear()
        self.cleared.emit()
