"""Registry persistence — the ``trove.conf`` file and the ``~/.trove`` pointer.

Layout of an initialized trove::

    <root>/trove.conf      registry (config + entries), JSON
    <root>/store/<name>    one file or directory per entry
    ~/.trove               symlink -> <root>/trove.conf

The registry is rewritten whole on every save. There is no locking: one
user runs one command at a time, and concurrent invocations against the
same registry are undefined.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from trove.errors import CorruptRegistry, NotInitialized, PathNotFound, SyncFailure
from trove.models import Entry, Trove, TroveConfig
from trove.paths import PathNormalizer, resolve_existing

logger = logging.getLogger(__name__)


class Registry:
    """Locates, loads and saves the registry for one home directory."""

    CONFIG_FILE = "trove.conf"
    STORE_DIR = "store"
    POINTER_NAME = ".trove"

    def __init__(self, normalizer: PathNormalizer):
        self.normalizer = normalizer

    @property
    def pointer_path(self) -> Path | None:
        if self.normalizer.home is None:
            return None
        return self.normalizer.home / self.POINTER_NAME

    def store_dir(self, trove: Trove) -> Path:
        return Path(os.path.realpath(self.normalizer.to_absolute(trove.config.store_path)))

    def registry_file(self, trove: Trove) -> Path:
        return self.normalizer.to_absolute(trove.config.path)

    # ------------------------------------------------------------------
    # Locate / load / save
    # ------------------------------------------------------------------

    def locate(self, explicit: str | Path | None = None) -> Path:
        """Find the active registry file.

        An explicit path wins; otherwise the ``~/.trove`` pointer is followed
        and canonicalized.

        Raises:
            NotInitialized: If neither yields an existing registry file.
        """
        if explicit is not None:
            try:
                return resolve_existing(explicit)
            except PathNotFound:
                raise NotInitialized(f"no registry at {explicit}")

        pointer = self.pointer_path
        if pointer is None or not (pointer.is_symlink() or pointer.exists()):
            raise NotInitialized()
        try:
            return resolve_existing(pointer)
        except PathNotFound:
            raise NotInitialized(f"{pointer} does not resolve to a registry")

    def load(self, explicit: str | Path | None = None) -> Trove:
        """Locate and parse the registry."""
        path = self.locate(explicit)
        logger.debug("Loading registry from %s", path)
        return self.read(path)

    def read(self, path: Path) -> Trove:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise CorruptRegistry(f"{path} is not valid JSON: {e}")
        except OSError as e:
            raise NotInitialized(f"cannot read registry {path}: {e}")

        try:
            return _dict_to_trove(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise CorruptRegistry(f"{path} has an unexpected layout: {e!r}")

    def save(self, trove: Trove) -> None:
        """Overwrite the registry file with the full trove.

        The new content goes to a sibling temp file first and is renamed into
        place, so a failed write never truncates the existing registry.
        """
        path = self.registry_file(trove)
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_text(json.dumps(_trove_to_dict(trove), indent=2) + "\n", encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            raise SyncFailure(f"could not write registry {path}: {e}")
        logger.debug("Saved %d entries to %s", len(trove.entries), path)

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def create(self, root: Path) -> Trove:
        """Write an empty registry and store directory under ``root``."""
        store = root / self.STORE_DIR
        try:
            store.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SyncFailure(f"could not create store directory {store}: {e}")

        trove = Trove(config=self.config_for(root))
        self.save(trove)
        logger.info("Created registry %s", root / self.CONFIG_FILE)
        return trove

    def config_for(self, root: Path) -> TroveConfig:
        return TroveConfig(
            path=self.normalizer.to_portable(root / self.CONFIG_FILE),
            store_path=self.normalizer.to_portable(root / self.STORE_DIR),
        )

    def relocate(self, trove: Trove, root: Path) -> bool:
        """Point a reused registry's config at ``root`` after the trove moved.

        Entries are kept as they are. Returns True if the config was rewritten.
        """
        current = Path(os.path.realpath(self.registry_file(trove)))
        if current == Path(os.path.realpath(root / self.CONFIG_FILE)):
            return False
        trove.config = self.config_for(root)
        self.save(trove)
        logger.info("Registry moved from %s; now at %s", current, root / self.CONFIG_FILE)
        return True

    def create_pointer(self, registry_path: Path, replace: bool = False) -> bool:
        """Point ``~/.trove`` at ``registry_path``.

        A dangling pointer is always replaced. A live pointer to another
        registry is left alone and reported, unless ``replace`` is set.
        Returns True if a link was written.
        """
        pointer = self.pointer_path
        if pointer is None:
            raise SyncFailure("cannot determine the home directory for the ~/.trove pointer")

        if pointer.is_symlink() and not pointer.exists():
            logger.info("Replacing dangling pointer %s -> %s", pointer, os.readlink(pointer))
            try:
                pointer.unlink()
            except OSError as e:
                raise SyncFailure(f"could not remove old pointer {pointer}: {e}")
        elif pointer.exists():
            current = Path(os.path.realpath(pointer))
            if current == Path(os.path.realpath(registry_path)):
                logger.info("%s already points at %s", pointer, registry_path)
                return False
            if not replace:
                logger.info("%s already exists (-> %s); leaving it in place", pointer, current)
                return False
            if not pointer.is_symlink():
                raise SyncFailure(f"{pointer} exists and is not a symlink; refusing to replace it")
            try:
                pointer.unlink()
            except OSError as e:
                raise SyncFailure(f"could not remove old pointer {pointer}: {e}")

        try:
            pointer.symlink_to(registry_path)
        except OSError as e:
            raise SyncFailure(f"could not create pointer {pointer} -> {registry_path}: {e}")
        logger.info("Linked %s -> %s", pointer, registry_path)
        return True


def _trove_to_dict(trove: Trove) -> dict:
    return {
        "config": {
            "path": trove.config.path,
            "store_path": trove.config.store_path,
        },
        "entries": [
            {
                "name": entry.name,
                "host_path": entry.host_path,
                "categories": sorted(entry.categories),
            }
            for entry in trove.sorted_entries()
        ],
    }


def _dict_to_trove(data: dict) -> Trove:
    config = data["config"]
    entries = set()
    for item in data.get("entries", []):
        categories = item.get("categories", [])
        if not isinstance(categories, list):
            raise TypeError(f"categories of '{item['name']}' must be a list")
        entries.add(
            Entry(
                name=str(item["name"]),
                host_path=str(item["host_path"]),
                categories=frozenset(str(c) for c in categories),
            )
        )
    return Trove(
        config=TroveConfig(path=str(config["path"]), store_path=str(config["store_path"])),
        entries=entries,
    )
