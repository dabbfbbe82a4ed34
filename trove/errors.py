"""Error kinds raised by the registry, the synchronizer and the command handlers.

Library code raises these; only the CLI catches them and turns them into a
single message plus a non-zero exit status.
"""

from __future__ import annotations


class TroveError(Exception):
    """Base class for every user-facing trove failure."""


class NotInitialized(TroveError):
    """No registry can be located (missing or dangling ``~/.trove`` pointer)."""

    def __init__(self, message: str = "trove is not initialized; run 'trove init <path>' first"):
        super().__init__(message)


class CorruptRegistry(TroveError):
    """The registry file exists but could not be parsed."""


class PathNotFound(TroveError):
    """A supplied filesystem path does not resolve to an existing object."""

    def __init__(self, path: object):
        self.path = path
        super().__init__(f"path does not exist: {path}")


class DuplicateName(TroveError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"an entry named '{name}' already exists")


class DuplicatePath(TroveError):
    def __init__(self, path: object, name: str):
        self.path = path
        self.name = name
        super().__init__(f"{path} is already tracked as '{name}'")


class InvalidEntryName(TroveError):
    """The name cannot be used as a single filename inside the store."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"invalid entry name: {name!r}")


class AmbiguousSelector(TroveError):
    """Mutually exclusive selectors were combined, or a required one is missing."""


class EntryNotFound(TroveError):
    pass


class NoMatchingEntries(TroveError):
    pass


class SyncFailure(TroveError):
    """A rename, symlink or unlink failed after validation had passed."""
