"""Garbage-collector roots for discovered derivations."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Protocol

from ..errors import EvalJobsError
from ..logging import get_logger


class RootRegistrationError(EvalJobsError):
    """Raised when a root cannot be written to the registry directory."""


class RootStore(Protocol):
    """Store capability for creating permanent roots."""

    def add_perm_root(self, store_path: str, root: Path) -> None:
        """Make ``root`` keep ``store_path`` alive."""


class SymlinkRootStore:
    """Creates roots as symlinks, the way a local filesystem store does."""

    def add_perm_root(self, store_path: str, root: Path) -> None:
        root.parent.mkdir(parents=True, exist_ok=True)
        # Replace atomically so a concurrent collector never sees a half-made root.
        temp = root.with_name(f".{root.name}.tmp-{os.getpid()}-{uuid.uuid4().hex[:8]}")
        os.symlink(store_path, temp)
        try:
            os.replace(temp, root)
        except OSError:
            temp.unlink(missing_ok=True)
            raise


class RootRegistrar:
    """Registers each job's derivation as a permanent root, at most once.

    With no ``roots_dir`` registration is disabled; the caller is expected
    to warn about that once at startup.
    """

    def __init__(
        self,
        roots_dir: Path | None,
        store: RootStore | None = None,
        *,
        dry_run: bool = False,
    ) -> None:
        self.roots_dir = roots_dir
        self.store = store or SymlinkRootStore()
        self.dry_run = dry_run
        self.logger = get_logger("gc_roots")
        self.registered = 0

    @property
    def enabled(self) -> bool:
        return self.roots_dir is not None and not self.dry_run

    def root_for(self, drv_path: str) -> Path:
        if self.roots_dir is None:
            raise RootRegistrationError("no roots directory configured")
        return self.roots_dir / os.path.basename(drv_path)

    def register(self, drv_path: str) -> bool:
        """Return True when a new root was created for ``drv_path``."""
        if self.roots_dir is None:
            return False
        root = self.root_for(drv_path)
        if self.dry_run:
            self.logger.debug("Dry-run: not registering %s at %s", drv_path, root)
            return False
        if os.path.lexists(root):
            return False
        try:
            self.store.add_perm_root(drv_path, root)
        except OSError as exc:
            raise RootRegistrationError(
                f"cannot register root {root} for {drv_path}: {exc}"
            ) from exc
        self.registered += 1
        self.logger.debug("Registered root %s -> %s", root, drv_path)
        return True


__all__ = ["RootRegistrar", "RootRegistrationError", "RootStore", "SymlinkRootStore"]
