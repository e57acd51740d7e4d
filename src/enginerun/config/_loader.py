"""Configuration file discovery and loading."""

import os
import tomllib
from pathlib import Path
from typing import Any

from enginerun.exceptions import ConfigLoadError

from ._models import Config

CONFIG_FILE_NAME = "enginerun.toml"
CONFIG_ENV_VAR = "ENGINERUN_CONFIG"


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Read and parse a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed TOML content as dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file cannot be parsed.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file: {e}"
        # lineno/colno attributes only exist on Python 3.14+
        raise ConfigLoadError(
            msg,
            path=path,
            line=getattr(e, "lineno", None),
            column=getattr(e, "colno", None),
        ) from e


def discover_config_file(start: Path | None = None) -> Path | None:
    """Find the configuration file to use.

    The ENGINERUN_CONFIG environment variable wins. Otherwise the start
    directory and its parents are searched for enginerun.toml.

    Args:
        start: Directory to start searching from. Defaults to the cwd.

    Returns:
        The path of the configuration file, or None if there is none.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()

    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None) -> Config:
    """Load configuration.

    Args:
        path: Explicit configuration file. When None the file is discovered,
            and a missing file yields the default configuration.

    Returns:
        The validated configuration.

    Raises:
        FileNotFoundError: If an explicit or env-provided file does not exist.
        ConfigLoadError: If the file cannot be parsed or fails validation.
    """
    config_path = path if path is not None else discover_config_file()
    if config_path is None:
        return Config()

    try:
        data = read_toml_file(config_path)
    except FileNotFoundError:
        raise
    except OSError as e:
        msg = f"Failed to read config file: {e}"
        raise ConfigLoadError(msg, path=config_path) from e

    return Config.from_dict(data, path=config_path)
