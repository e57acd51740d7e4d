"""Exit codes for enginerun commands."""

EXIT_SUCCESS: int = 0
"""Engine exited normally."""

EXIT_RUN_FAILED: int = 1
"""Engine could not be launched, exited abnormally, or the save failed."""

EXIT_CONFIG_ERROR: int = 2
"""Configuration could not be loaded or a startup artifact could not be written."""

EXIT_NOT_FOUND: int = 3
"""Requested profile not found."""

SIGNAL_EXIT_BASE: int = 128
"""Offset added to the signal number when the engine was killed by a signal."""
