"""Trove data models — tracked entries, registry config and the entry store."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class Entry:
    """One tracked file or directory.

    ``name`` doubles as the filename inside the store. ``host_path`` is the
    original location in portable form (see ``trove.paths``).
    """

    name: str
    host_path: str
    categories: frozenset[str] = frozenset()

    def store_location(self, store_dir: Path) -> Path:
        return store_dir / self.name


@dataclass(frozen=True)
class TroveConfig:
    """Registry-level settings; both paths are in portable form."""

    path: str
    store_path: str


@dataclass
class Trove:
    """The registry aggregate: config plus the current set of entries.

    Entries are kept in a set keyed by full structural equality. Uniqueness
    of ``name`` and of the resolved host path is not enforced here; callers
    check both with the lookups below before inserting.

    Nothing is persisted automatically: call ``Registry.save`` after every
    mutation.
    """

    config: TroveConfig
    entries: set[Entry] = field(default_factory=set)

    def add(self, entry: Entry) -> None:
        self.entries.add(entry)

    def discard(self, entry: Entry) -> None:
        self.entries.discard(entry)

    def sorted_entries(self) -> list[Entry]:
        return sorted(self.entries, key=lambda e: e.name)

    # ------------------------------------------------------------------
    # Lookups (linear scans)
    # ------------------------------------------------------------------

    def find_by_name(self, name: str) -> Entry | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def find_by_host_path(self, path: Path, store_dir: Path) -> Entry | None:
        """Find the entry that physically lives at ``path`` inside the store.

        Matches on ``store_dir / name`` rather than the recorded host path, so
        a resolved symlink leads back to the entry it points at.
        """
        for entry in self.entries:
            if entry.store_location(store_dir) == path:
                return entry
        return None

    def find_by_recorded_path(self, portable: str) -> Entry | None:
        """Find the entry whose recorded (portable) host path equals ``portable``."""
        for entry in self.entries:
            if entry.host_path == portable:
                return entry
        return None

    def find_by_category(self, category: str) -> set[Entry] | None:
        """Return every entry tagged ``category``, or None when there are none."""
        found = {e for e in self.entries if category in e.categories}
        return found or None


class EntryState(Enum):
    """On-disk state of an entry's host path relative to its store copy."""

    LINKED = "linked"  # Host path is a symlink to the store copy
    PACKED = "packed"  # Nothing at the host path
    CONFLICT = "conflict"  # Something else occupies the host path
    MISSING = "missing"  # Store copy is gone


def parse_categories(raw: str | None) -> frozenset[str]:
    """Split a comma-separated category string, dropping empty segments."""
    if not raw:
        return frozenset()
    return frozenset(part.strip() for part in raw.split(",") if part.strip())
