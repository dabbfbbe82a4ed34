"""Path normalization — portable registry paths and CLI path resolution.

Registry files store every path with the user's home directory replaced by
a placeholder token, so a trove copied to another machine with the same
relative layout keeps working::

    /home/alice/.vimrc  <->  $HOME/.vimrc

The home directory is injected rather than looked up at each call site, so
tests can substitute a synthetic one.
"""

from __future__ import annotations

import os
from pathlib import Path

from trove.errors import PathNotFound

HOME_TOKEN = "$HOME"


class PathNormalizer:
    """Two-way mapping between absolute host paths and portable strings."""

    def __init__(self, home: str | Path | None):
        self.home = Path(home) if home is not None else None

    @classmethod
    def from_environment(cls, home: str | Path | None = None) -> "PathNormalizer":
        """Build a normalizer for the current user.

        An explicit ``home`` wins. Otherwise ``Path.home()`` is used; when the
        home directory cannot be determined the normalizer degrades to leaving
        paths untouched.
        """
        if home is not None:
            return cls(home)
        try:
            return cls(Path.home())
        except RuntimeError:
            return cls(None)

    def to_portable(self, path: str | Path) -> str:
        """Replace a leading home-directory prefix with ``$HOME``."""
        path = Path(path)
        if self.home is None:
            return str(path)
        try:
            rest = path.relative_to(self.home)
        except ValueError:
            return str(path)
        if rest == Path("."):
            return HOME_TOKEN
        return f"{HOME_TOKEN}/{rest.as_posix()}"

    def to_absolute(self, portable: str) -> Path:
        """Expand a leading ``$HOME`` token back into the home directory."""
        if self.home is None:
            return Path(portable)
        if portable == HOME_TOKEN:
            return self.home
        if portable.startswith(HOME_TOKEN + "/"):
            return self.home / portable[len(HOME_TOKEN) + 1:]
        return Path(portable)


def absolutize(path: str | Path, cwd: str | Path | None = None) -> Path:
    """Join ``path`` against the working directory without touching the disk.

    Symlinks are not followed; ``..`` segments are collapsed lexically.
    """
    base = Path(cwd) if cwd is not None else Path.cwd()
    return Path(os.path.normpath(base / Path(path).expanduser()))


def resolve_existing(path: str | Path, cwd: str | Path | None = None) -> Path:
    """Resolve a CLI-supplied path to its canonical absolute form.

    Raises:
        PathNotFound: If nothing exists at the resolved location. Only paths
            that currently exist are eligible to be registered or resolved.
    """
    joined = absolutize(path, cwd)
    try:
        return joined.resolve(strict=True)
    except (OSError, RuntimeError):
        raise PathNotFound(path)
