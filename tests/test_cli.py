"""
Tests for the click command surface.
"""

import json
from pathlib import Path

import yaml
from click.testing import CliRunner

from trove import __version__
from trove.cli import main


def _invoke(home: Path, *args: str):
    runner = CliRunner()
    return runner.invoke(main, list(args), env={"TROVE_HOME": str(home), "TROVE_REGISTRY": None})


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        for verb in ("init", "add", "remove", "deploy", "pack", "status"):
            assert verb in result.output

    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestWorkflow:
    def test_init_add_status_remove(self, home: Path, trove_root: Path, vimrc: Path):
        result = _invoke(home, "init", str(trove_root))
        assert result.exit_code == 0, result.output
        assert "Initialized" in result.output

        result = _invoke(home, "add", str(vimrc), "vimrc", "--categories=editor,cli")
        assert result.exit_code == 0, result.output
        assert vimrc.is_symlink()

        result = _invoke(home, "status", "--format", "json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["entries"] == [
            {
                "name": "vimrc",
                "host_path": "$HOME/.vimrc",
                "categories": ["cli", "editor"],
                "state": "linked",
            }
        ]

        result = _invoke(home, "remove", "--name", "vimrc")
        assert result.exit_code == 0, result.output
        assert not vimrc.is_symlink()
        assert vimrc.read_text() == "set number\n"

    def test_init_twice(self, home: Path, trove_root: Path):
        _invoke(home, "init", str(trove_root))
        result = _invoke(home, "init", str(trove_root))
        assert result.exit_code == 0
        assert "existing" in result.output

    def test_pack_and_deploy(self, home: Path, trove_root: Path, vimrc: Path):
        _invoke(home, "init", str(trove_root))
        _invoke(home, "add", str(vimrc), "vimrc", "-c", "editor")

        result = _invoke(home, "pack", "--category", "editor")
        assert result.exit_code == 0, result.output
        assert not vimrc.is_symlink()

        result = _invoke(home, "deploy", "--name", "vimrc")
        assert result.exit_code == 0, result.output
        assert vimrc.is_symlink()

        # Second deploy skips the already linked entry but still succeeds
        result = _invoke(home, "deploy")
        assert result.exit_code == 0
        assert "Skipped" in result.output

    def test_status_table_and_yaml(self, home: Path, trove_root: Path, vimrc: Path):
        _invoke(home, "init", str(trove_root))
        result = _invoke(home, "status")
        assert result.exit_code == 0
        assert "No entries tracked" in result.output

        _invoke(home, "add", str(vimrc), "vimrc")
        result = _invoke(home, "status")
        assert result.exit_code == 0
        assert "vimrc" in result.output
        assert "linked" in result.output

        result = _invoke(home, "status", "--format", "yaml")
        data = yaml.safe_load(result.output)
        assert data["entries"][0]["name"] == "vimrc"


class TestErrors:
    def test_not_initialized(self, home: Path):
        result = _invoke(home, "status")
        assert result.exit_code == 1
        assert "not initialized" in result.output

    def test_duplicate_name(self, home: Path, trove_root: Path, vimrc: Path):
        _invoke(home, "init", str(trove_root))
        _invoke(home, "add", str(vimrc), "vimrc")
        other = home / ".gvimrc"
        other.write_text("x")

        result = _invoke(home, "add", str(other), "vimrc")
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert not other.is_symlink()

    def test_remove_needs_one_selector(self, home: Path, trove_root: Path):
        _invoke(home, "init", str(trove_root))
        result = _invoke(home, "remove")
        assert result.exit_code == 1
        assert "exactly one" in result.output

    def test_unknown_category(self, home: Path, trove_root: Path):
        _invoke(home, "init", str(trove_root))
        result = _invoke(home, "deploy", "--category", "gui")
        assert result.exit_code == 1
        assert "gui" in result.output

    def test_explicit_registry_option(self, home: Path, trove_root: Path):
        _invoke(home, "init", str(trove_root))
        (home / ".trove").unlink()

        result = _invoke(home, "--registry", str(trove_root / "trove.conf"), "status")
        assert result.exit_code == 0, result.output
