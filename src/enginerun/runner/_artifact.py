"""Transient startup artifact handed to the engine process."""

import contextlib
import tempfile
from pathlib import Path
from typing import Self, final

from enginerun.exceptions import StartupArtifactError

ARTIFACT_PREFIX = "enginerun-startup-"
ARTIFACT_SUFFIX = ".txt"


@final
class StartupArtifact:
    """A uniquely named file holding the startup instruction of one run.

    Created fresh for every launch and removed once the process has exited.
    """

    __slots__ = ("_path",)

    def __init__(self, path: Path) -> None:
        self._path: Path | None = path

    @classmethod
    def create(cls, content: str, *, directory: Path | None = None) -> Self:
        """Create a new artifact and write the content into it.

        Args:
            content: Text for the engine to read at startup.
            directory: Directory to create the file in. Uses the system
                temporary directory if None.

        Returns:
            The created artifact.

        Raises:
            StartupArtifactError: If the file cannot be created or written.
        """
        path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                prefix=ARTIFACT_PREFIX,
                suffix=ARTIFACT_SUFFIX,
                dir=directory,
                delete=False,
            ) as f:
                path = Path(f.name)
                _ = f.write(content)
        except OSError as e:
            if path is not None:
                with contextlib.suppress(OSError):
                    path.unlink()
            msg = f"Failed to create startup artifact: {e}"
            raise StartupArtifactError(msg, directory=directory, cause=e) from e
        return cls(path)

    @property
    def path(self) -> Path:
        """Return the artifact path.

        Raises:
            StartupArtifactError: If the artifact has already been removed.
        """
        if self._path is None:
            msg = "Startup artifact has been removed"
            raise StartupArtifactError(msg)
        return self._path

    @property
    def removed(self) -> bool:
        """Return True once the file has been removed."""
        return self._path is None

    def remove(self) -> None:
        """Delete the file. Calling this more than once is harmless."""
        path, self._path = self._path, None
        if path is not None:
            with contextlib.suppress(OSError):
                path.unlink()
