"""Store synchronizer — the filesystem side effects behind each command.

Every step is ordered so a failure halfway never loses the user's file:

- bring into store: rename host -> store, then symlink host -> store
- restore from store: remove the symlink, then rename store -> host

Mid-sequence failures are not rolled back. They raise ``SyncFailure`` with
a message saying where the file is now, so the user can put it right.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from trove.errors import SyncFailure
from trove.models import EntryState

logger = logging.getLogger(__name__)


class StoreSync:
    """Stateless orchestration of rename / symlink / unlink calls."""

    def bring_into_store(self, host_path: Path, store_dir: Path, name: str) -> Path:
        """Move ``host_path`` to ``store_dir/name`` and link it back."""
        target = store_dir / name
        if not store_dir.is_dir():
            raise SyncFailure(f"store directory {store_dir} is missing; run 'trove init' again")
        try:
            os.rename(host_path, target)
        except OSError as e:
            raise SyncFailure(f"could not move {host_path} into the store: {e}")
        logger.debug("Moved %s -> %s", host_path, target)

        try:
            host_path.symlink_to(target)
        except OSError as e:
            raise SyncFailure(
                f"{host_path} was moved to {target} but the link back could not be "
                f"created ({e}); the file now lives at {target}"
            )
        logger.debug("Linked %s -> %s", host_path, target)
        return target

    def restore_from_store(self, store_path: Path, host_path: Path) -> None:
        """Remove the symlink at ``host_path`` and move the store copy back."""
        self._remove_link(host_path)
        try:
            os.rename(store_path, host_path)
        except OSError as e:
            raise SyncFailure(
                f"could not move {store_path} back to {host_path} ({e}); "
                f"the file remains at {store_path}"
            )
        logger.debug("Restored %s -> %s", store_path, host_path)

    def relink(self, store_path: Path, host_path: Path) -> None:
        """Create the symlink ``host_path -> store_path``; the store is untouched."""
        if not (store_path.exists() or store_path.is_symlink()):
            raise SyncFailure(f"store copy {store_path} is missing")
        if host_path.is_symlink() and _same_file(host_path, store_path):
            raise SyncFailure(f"{host_path} is already linked")
        try:
            host_path.parent.mkdir(parents=True, exist_ok=True)
            host_path.symlink_to(store_path)
        except FileExistsError:
            raise SyncFailure(f"{host_path} already exists")
        except OSError as e:
            raise SyncFailure(f"could not link {host_path} -> {store_path}: {e}")
        logger.debug("Linked %s -> %s", host_path, store_path)

    def unlink(self, host_path: Path) -> None:
        """Remove the symlink at ``host_path``; an absent link is fine."""
        self._remove_link(host_path)

    def inspect(self, store_path: Path, host_path: Path) -> EntryState:
        if not (store_path.exists() or store_path.is_symlink()):
            return EntryState.MISSING
        if host_path.is_symlink():
            if _same_file(host_path, store_path):
                return EntryState.LINKED
            return EntryState.CONFLICT
        if host_path.exists():
            return EntryState.CONFLICT
        return EntryState.PACKED

    def _remove_link(self, host_path: Path) -> None:
        if not host_path.is_symlink():
            if host_path.exists():
                raise SyncFailure(f"{host_path} is not a symlink; refusing to touch it")
            logger.debug("No link at %s", host_path)
            return
        try:
            host_path.unlink()
        except FileNotFoundError:
            logger.debug("No link at %s", host_path)
        except OSError as e:
            raise SyncFailure(f"could not remove link {host_path}: {e}")
        else:
            logger.debug("Removed link %s", host_path)


def _same_file(link: Path, target: Path) -> bool:
    return Path(os.path.realpath(link)) == Path(os.path.realpath(target))
