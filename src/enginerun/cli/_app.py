"""The command-line interface for enginerun."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

import anyio
from cyclopts import App, Parameter
from rich.console import Console
from rich.table import Table

from enginerun.config import Config, load_config
from enginerun.exceptions import ConfigError, ProfileNotFoundError
from enginerun.utils import create_logger

from ._exit_codes import EXIT_CONFIG_ERROR, EXIT_NOT_FOUND

app = App(
    name="enginerun",
    help="Launch the engine from a debug profile and capture its output.",
    help_on_error=True,
)

ConfigOption = Annotated[
    Path | None,
    Parameter(name="--config", help="Path to config file (default: discovered enginerun.toml)."),
]


def _load_config_or_exit(path: Path | None, console: Console) -> Config:
    try:
        return load_config(path)
    except FileNotFoundError as e:
        console.print(f"[red]Config file not found: {e.filename or path}[/red]")
        raise SystemExit(EXIT_CONFIG_ERROR) from None
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(EXIT_CONFIG_ERROR) from None


@app.command(name="run")
def run(
    *,
    profile: Annotated[str, Parameter(help="Name of the debug profile to launch.")] = "default",
    instruction: Annotated[
        str,
        Parameter(help="Startup instruction written to the startup artifact."),
    ] = "",
    save_command: Annotated[
        str | None,
        Parameter(help="Command that must succeed before the engine is launched."),
    ] = None,
    config: ConfigOption = None,
) -> None:
    """Launch the engine and stream its output until it exits.

    With --save-command, the run is requested as a delayed start and only
    launched once the save command has succeeded; a failing save cancels
    the run. Ctrl-C asks the engine to terminate.
    """
    from ._run import run_engine  # noqa: PLC0415

    error_console = Console(stderr=True)
    loaded_config = _load_config_or_exit(config, error_console)

    try:
        debug_profile = loaded_config.get_profile(profile)
    except ProfileNotFoundError:
        error_console.print(f"[yellow]Profile '{profile}' not found[/yellow]")
        raise SystemExit(EXIT_NOT_FOUND) from None

    logger = create_logger(
        level=loaded_config.logging.level.value,
        log_format=loaded_config.logging.format.value,  # type: ignore[arg-type]
        log_file=loaded_config.logging.file,
        command="run",
        profile=profile,
    )

    exit_code = anyio.run(
        lambda: run_engine(
            debug_profile,
            instruction,
            settings=loaded_config.runner,
            logger=logger,
            save_command=save_command,
        )
    )

    raise SystemExit(exit_code)


@app.command(name="profiles")
def profiles(*, config: ConfigOption = None) -> None:
    """List the configured debug profiles."""
    console = Console()
    loaded_config = _load_config_or_exit(config, Console(stderr=True))

    if not loaded_config.profiles:
        console.print("[dim]No profiles configured.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Executable")
    table.add_column("Arguments")
    table.add_column("Description")
    for name, profile in sorted(loaded_config.profiles.items()):
        table.add_row(
            name,
            profile.executable,
            " ".join(profile.arguments),
            profile.description,
        )
    console.print(table)


def main() -> None:
    """Run the enginerun CLI."""
    app()
