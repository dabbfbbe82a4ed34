"""Shared fixtures: a synthetic home directory and an initialized trove."""

from pathlib import Path

import pytest

from trove.commands import Commands
from trove.paths import PathNormalizer


@pytest.fixture
def home(tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def commands(home: Path) -> Commands:
    return Commands(PathNormalizer(home), cwd=home)


@pytest.fixture
def trove_root(tmp_path: Path) -> Path:
    root = tmp_path / "store-root"
    root.mkdir()
    return root


@pytest.fixture
def initialized(commands: Commands, trove_root: Path) -> Commands:
    commands.init(trove_root)
    return commands


@pytest.fixture
def vimrc(home: Path) -> Path:
    path = home / ".vimrc"
    path.write_text("set number\n")
    return path
