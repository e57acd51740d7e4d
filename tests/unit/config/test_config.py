"""Tests for enginerun.config module."""

from pathlib import Path

import pytest

from enginerun.config import (
    CONFIG_ENV_VAR,
    CONFIG_FILE_NAME,
    Config,
    LogFormat,
    LogLevel,
    discover_config_file,
    load_config,
    read_toml_file,
)
from enginerun.exceptions import ConfigLoadError, ProfileNotFoundError
from enginerun.runner import DebugProfile

FULL_CONFIG = """
[logging]
level = "debug"
format = "json"
file = "~/logs/enginerun.log"

[runner]
shutdown_timeout = 1.5
clear_log_on_start = false
artifact_dir = "/var/tmp/enginerun"

[profiles.openmw]
executable = "openmw"
arguments = ["--skip-menu"]
cwd = "/opt/openmw"
env = { OPENMW_DEBUG = "1" }
script_text = "tgm"
description = "OpenMW with god mode"

[profiles.custom]
executable = "engine"
artifact_argument = "--startup={path}"
"""


@pytest.fixture(autouse=True)
def no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


def write_config(directory: Path, content: str) -> Path:
    path = directory / CONFIG_FILE_NAME
    _ = path.write_text(content, encoding="utf-8")
    return path


class TestConfigDefaults:
    def test_empty_config(self) -> None:
        config = Config()
        assert config.logging.level is LogLevel.INFO
        assert config.logging.format is LogFormat.TEXT
        assert config.logging.file == ""
        assert config.runner.shutdown_timeout == 5.0
        assert config.runner.clear_log_on_start is True
        assert config.runner.artifact_path is None
        assert config.profiles == {}


class TestFromDict:
    def test_unknown_sections_are_ignored(self) -> None:
        config = Config.from_dict({"editor": {"theme": "dark"}})
        assert config == Config()

    def test_invalid_value_reports_location(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILE_NAME

        with pytest.raises(ConfigLoadError) as exc_info:
            _ = Config.from_dict({"runner": {"shutdown_timeout": 0}}, path=path)

        assert "runner.shutdown_timeout" in str(exc_info.value)
        assert exc_info.value.path == path

    def test_profile_requires_executable(self) -> None:
        with pytest.raises(ConfigLoadError, match=r"profiles\.broken\.executable"):
            _ = Config.from_dict({"profiles": {"broken": {"arguments": []}}})

    def test_profile_rejects_invalid_artifact_argument(self) -> None:
        with pytest.raises(
            ConfigLoadError, match=r"profiles\.custom\.artifact_argument"
        ):
            _ = Config.from_dict(
                {
                    "profiles": {
                        "custom": {"executable": "a", "artifact_argument": "--opt={0}"}
                    }
                }
            )

    def test_profile_rejects_unknown_keys(self) -> None:
        with pytest.raises(ConfigLoadError, match="exectuable"):
            _ = Config.from_dict(
                {"profiles": {"typo": {"executable": "a", "exectuable": "b"}}}
            )


class TestGetProfile:
    def test_converts_to_debug_profile(self, tmp_path: Path) -> None:
        config = load_config(write_config(tmp_path, FULL_CONFIG))

        profile = config.get_profile("openmw")

        assert profile == DebugProfile(
            executable="openmw",
            arguments=("--skip-menu",),
            cwd=Path("/opt/openmw"),
            env={"OPENMW_DEBUG": "1"},
            script_text="tgm",
            description="OpenMW with god mode",
        )

    def test_custom_artifact_argument(self, tmp_path: Path) -> None:
        config = load_config(write_config(tmp_path, FULL_CONFIG))

        profile = config.get_profile("custom")

        assert profile.cwd is None
        assert profile.build_command(Path("a.txt")) == ("engine", "--startup=a.txt")

    def test_missing_profile(self) -> None:
        with pytest.raises(ProfileNotFoundError) as exc_info:
            _ = Config().get_profile("openmw")

        assert exc_info.value.profile_name == "openmw"
        assert "Profile 'openmw' not found" in str(exc_info.value)
        assert isinstance(exc_info.value, KeyError)


class TestReadTomlFile:
    def test_parse_error_has_location(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "[runner]\nshutdown_timeout = \n")

        with pytest.raises(ConfigLoadError) as exc_info:
            _ = read_toml_file(path)

        assert exc_info.value.path == path
        assert "line 2" in str(exc_info.value)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            _ = read_toml_file(tmp_path / "missing.toml")


class TestDiscoverConfigFile:
    def test_finds_file_in_start_directory(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "")
        assert discover_config_file(tmp_path) == path.resolve()

    def test_finds_file_in_parent(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "")
        nested = tmp_path / "mods" / "balmora"
        nested.mkdir(parents=True)

        assert discover_config_file(nested) == path.resolve()

    def test_none_when_absent(self, tmp_path: Path) -> None:
        nested = tmp_path / "empty"
        nested.mkdir()
        # tmp_path parents are outside the test's control
        result = discover_config_file(nested)
        assert result is None or not result.is_relative_to(tmp_path)

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _ = write_config(tmp_path, "")
        override = tmp_path / "other.toml"
        monkeypatch.setenv(CONFIG_ENV_VAR, str(override))

        assert discover_config_file(tmp_path) == override


class TestLoadConfig:
    def test_full_config(self, tmp_path: Path) -> None:
        config = load_config(write_config(tmp_path, FULL_CONFIG))

        assert config.logging.level is LogLevel.DEBUG
        assert config.logging.format is LogFormat.JSON
        assert config.logging.file == "~/logs/enginerun.log"
        assert config.runner.shutdown_timeout == 1.5
        assert config.runner.clear_log_on_start is False
        assert config.runner.artifact_path == Path("/var/tmp/enginerun")
        assert sorted(config.profiles) == ["custom", "openmw"]

    def test_discovered_from_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _ = write_config(tmp_path, FULL_CONFIG)
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert "openmw" in config.profiles

    def test_explicit_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            _ = load_config(tmp_path / "missing.toml")

    def test_env_missing_file_raises(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.toml"))

        with pytest.raises(FileNotFoundError):
            _ = load_config()

    def test_invalid_file_raises(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, '[logging]\nlevel = "verbose"\n')

        with pytest.raises(ConfigLoadError, match="logging.level") as exc_info:
            _ = load_config(path)

        assert exc_info.value.path == path
