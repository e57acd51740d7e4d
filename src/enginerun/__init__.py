"""Launch and supervise the engine process from the editor."""

__version__ = "0.1.0"
