"""Command-line interface for enginerun."""

from ._app import app, main

__all__ = ["app", "main"]
