"""Configuration loading for enginerun.

Configuration lives in a TOML file (``enginerun.toml``) with ``logging``,
``runner`` and ``profiles`` sections. Profiles are converted into
``DebugProfile`` instances for the runner.
"""

from ._loader import (
    CONFIG_ENV_VAR,
    CONFIG_FILE_NAME,
    discover_config_file,
    load_config,
    read_toml_file,
)
from ._models import (
    Config,
    LogFormat,
    LoggingConfig,
    LogLevel,
    ProfileConfig,
    RunnerConfig,
)

__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILE_NAME",
    "Config",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "ProfileConfig",
    "RunnerConfig",
    "discover_config_file",
    "load_config",
    "read_toml_file",
]
