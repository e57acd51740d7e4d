from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import anyio
import pytest

from enginerun.runner import Runner

if TYPE_CHECKING:
    from unittest.mock import AsyncMock

    from pytest_mock import MockerFixture


@pytest.fixture
def artifact_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "artifacts"
    directory.mkdir()
    return directory


@pytest.fixture
def spawn(mocker: MockerFixture) -> AsyncMock:
    """Spy on engine process creation."""
    return mocker.patch("anyio.open_process", wraps=anyio.open_process)


@pytest.fixture
def make_runner(artifact_dir: Path) -> Callable[..., Runner]:
    def factory(**kwargs: object) -> Runner:
        kwargs.setdefault("artifact_dir", artifact_dir)
        kwargs.setdefault("shutdown_timeout", 2.0)
        return Runner(**kwargs)  # pyright: ignore[reportArgumentType]

    return factory
