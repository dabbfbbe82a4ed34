"""Command handlers — one per verb, composing registry, lookups and sync.

Validation always runs before any filesystem mutation. Batch commands
(deploy, pack) handle entries one at a time, in name order, and a failure
on one entry never stops the rest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from trove.errors import (
    AmbiguousSelector,
    DuplicateName,
    DuplicatePath,
    EntryNotFound,
    InvalidEntryName,
    NoMatchingEntries,
    PathNotFound,
    SyncFailure,
)
from trove.models import Entry, EntryState, Trove, parse_categories
from trove.paths import PathNormalizer, absolutize, resolve_existing
from trove.registry import Registry
from trove.sync import StoreSync

logger = logging.getLogger(__name__)


@dataclass
class InitResult:
    trove: Trove
    registry_path: Path
    created: bool  # False when an existing registry was reused
    pointer_created: bool


@dataclass
class BatchResult:
    """Per-entry outcome of a deploy or pack run."""

    done: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)  # name -> reason

    @property
    def ok(self) -> bool:
        return not self.skipped


@dataclass
class StatusReport:
    trove: Trove
    registry_path: Path
    store_dir: Path
    states: dict[str, EntryState] = field(default_factory=dict)


class Commands:
    """Entry point for every trove operation.

    Args:
        normalizer: Maps between host paths and portable registry paths;
            carries the home directory used for this invocation.
        registry_path: Explicit registry file, bypassing ``~/.trove``.
        cwd: Base for relative CLI paths (defaults to the process cwd).
    """

    def __init__(
        self,
        normalizer: PathNormalizer,
        registry_path: str | Path | None = None,
        cwd: str | Path | None = None,
    ):
        self.normalizer = normalizer
        self.registry = Registry(normalizer)
        self.sync = StoreSync()
        self.registry_path = registry_path
        self.cwd = cwd

    # ── init ─────────────────────────────────────────────────────────

    def init(self, path: str | Path, force: bool = False) -> InitResult:
        """Create a trove under ``path``, or re-link an existing one.

        ``force`` replaces a ``~/.trove`` pointer that resolves elsewhere.
        """
        root = resolve_existing(path, self.cwd)
        registry_file = root / Registry.CONFIG_FILE

        if registry_file.exists():
            trove = self.registry.read(registry_file)
            created = False
            logger.info("Registry already exists at %s", registry_file)
            self.registry.relocate(trove, root)
        else:
            trove = self.registry.create(root)
            created = True

        pointer_created = self.registry.create_pointer(registry_file, replace=force)
        return InitResult(
            trove=trove,
            registry_path=registry_file,
            created=created,
            pointer_created=pointer_created,
        )

    # ── add ──────────────────────────────────────────────────────────

    def add(self, path: str | Path, name: str, categories: str | None = None) -> Entry:
        """Move ``path`` into the store under ``name`` and link it back."""
        _check_name(name)
        trove = self._load()
        store_dir = self.registry.store_dir(trove)
        host_path = resolve_existing(path, self.cwd)

        if trove.find_by_name(name) is not None:
            raise DuplicateName(name)
        if (store_dir / name).exists() or (store_dir / name).is_symlink():
            raise DuplicateName(name)
        existing = trove.find_by_host_path(host_path, store_dir) or trove.find_by_recorded_path(
            self.normalizer.to_portable(host_path)
        )
        if existing is not None:
            raise DuplicatePath(host_path, existing.name)

        entry = Entry(
            name=name,
            host_path=self.normalizer.to_portable(host_path),
            categories=parse_categories(categories),
        )
        self.sync.bring_into_store(host_path, store_dir, name)
        trove.add(entry)
        self.registry.save(trove)
        logger.info("Added %s as '%s'", host_path, name)
        return entry

    # ── remove ───────────────────────────────────────────────────────

    def remove(self, path: str | Path | None = None, name: str | None = None) -> Entry:
        """Stop tracking an entry and move its store copy back into place.

        The registry is saved before the filesystem is touched, so it never
        references an entry whose restore has already started.
        """
        if (path is None) == (name is None):
            raise AmbiguousSelector("remove needs exactly one of --path or --name")

        trove = self._load()
        store_dir = self.registry.store_dir(trove)
        if name is not None:
            entry = trove.find_by_name(name)
            if entry is None:
                raise EntryNotFound(f"no entry named '{name}'")
        else:
            entry = self._find_by_path(trove, store_dir, path)

        trove.discard(entry)
        self.registry.save(trove)

        host_path = self.normalizer.to_absolute(entry.host_path)
        self.sync.restore_from_store(entry.store_location(store_dir), host_path)
        logger.info("Removed '%s'; restored %s", entry.name, host_path)
        return entry

    def _find_by_path(self, trove: Trove, store_dir: Path, path: str | Path) -> Entry:
        try:
            entry = trove.find_by_host_path(resolve_existing(path, self.cwd), store_dir)
        except PathNotFound:
            # Packed entries have nothing on disk at their host path.
            entry = trove.find_by_recorded_path(
                self.normalizer.to_portable(absolutize(path, self.cwd))
            )
            if entry is None:
                raise
        if entry is None:
            raise EntryNotFound(f"{path} is not tracked")
        return entry

    # ── deploy / pack ────────────────────────────────────────────────

    def deploy(self, category: str | None = None, name: str | None = None) -> BatchResult:
        """Link the selected entries back into place."""
        trove = self._load()
        store_dir = self.registry.store_dir(trove)
        result = BatchResult()
        for entry in self._select(trove, category, name):
            host_path = self.normalizer.to_absolute(entry.host_path)
            try:
                self.sync.relink(entry.store_location(store_dir), host_path)
            except SyncFailure as e:
                logger.warning("Skipping '%s': %s", entry.name, e)
                result.skipped[entry.name] = str(e)
            else:
                result.done.append(entry.name)
        return result

    def pack(self, category: str | None = None, name: str | None = None) -> BatchResult:
        """Remove the links of the selected entries; store copies stay."""
        trove = self._load()
        result = BatchResult()
        for entry in self._select(trove, category, name):
            try:
                self.sync.unlink(self.normalizer.to_absolute(entry.host_path))
            except SyncFailure as e:
                logger.debug("Leaving '%s' as is: %s", entry.name, e)
                result.skipped[entry.name] = str(e)
            else:
                result.done.append(entry.name)
        return result

    def _select(self, trove: Trove, category: str | None, name: str | None) -> list[Entry]:
        if category is not None and name is not None:
            raise AmbiguousSelector("use at most one of --category or --name")
        if name is not None:
            entry = trove.find_by_name(name)
            if entry is None:
                raise EntryNotFound(f"no entry named '{name}'")
            return [entry]
        if category is not None:
            found = trove.find_by_category(category)
            if found is None:
                raise NoMatchingEntries(f"no entries in category '{category}'")
            return sorted(found, key=lambda e: e.name)
        return trove.sorted_entries()

    # ── status ───────────────────────────────────────────────────────

    def status(self) -> StatusReport:
        registry_path = self.registry.locate(self.registry_path)
        trove = self.registry.read(registry_path)
        store_dir = self.registry.store_dir(trove)
        report = StatusReport(trove=trove, registry_path=registry_path, store_dir=store_dir)
        for entry in trove.sorted_entries():
            report.states[entry.name] = self.sync.inspect(
                entry.store_location(store_dir),
                self.normalizer.to_absolute(entry.host_path),
            )
        return report

    def _load(self) -> Trove:
        return self.registry.load(self.registry_path)


def _check_name(name: str) -> None:
    if not name or name in (".", "..") or "/" in name or "\0" in name:
        raise InvalidEntryName(name)
