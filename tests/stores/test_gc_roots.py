"""Tests for garbage-collector root registration."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from evaljobs.stores import RootRegistrar, RootRegistrationError, SymlinkRootStore

DRV = "/nix/store/00000000000000000000000000000000-hello-2.12.drv"


def test_register_creates_symlink_named_after_drv(tmp_path: Path) -> None:
    roots = tmp_path / "gcroots" / "hydra"
    registrar = RootRegistrar(roots)

    assert registrar.register(DRV) is True

    root = roots / os.path.basename(DRV)
    assert root.is_symlink()
    assert os.readlink(root) == DRV
    assert registrar.registered == 1


def test_register_is_idempotent(tmp_path: Path) -> None:
    registrar = RootRegistrar(tmp_path)

    assert registrar.register(DRV) is True
    assert registrar.register(DRV) is False
    assert RootRegistrar(tmp_path).register(DRV) is False

    assert [entry.name for entry in tmp_path.iterdir()] == [os.path.basename(DRV)]
    assert registrar.registered == 1


def test_existing_dangling_root_is_left_alone(tmp_path: Path) -> None:
    root = tmp_path / os.path.basename(DRV)
    os.symlink("/nix/store/gone.drv", root)

    assert RootRegistrar(tmp_path).register(DRV) is False
    assert os.readlink(root) == "/nix/store/gone.drv"


def test_registration_disabled_without_directory(tmp_path: Path) -> None:
    registrar = RootRegistrar(None)

    assert not registrar.enabled
    assert registrar.register(DRV) is False
    with pytest.raises(RootRegistrationError):
        registrar.root_for(DRV)


def test_dry_run_does_not_touch_the_filesystem(tmp_path: Path) -> None:
    roots = tmp_path / "roots"
    registrar = RootRegistrar(roots, dry_run=True)

    assert not registrar.enabled
    assert registrar.register(DRV) is False
    assert not roots.exists()


def test_io_errors_are_fatal(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    registrar = RootRegistrar(blocker / "roots")

    with pytest.raises(RootRegistrationError, match="cannot register root"):
        registrar.register(DRV)


def test_symlink_store_replaces_atomically(tmp_path: Path) -> None:
    store = SymlinkRootStore()
    root = tmp_path / "link"

    store.add_perm_root("/nix/store/a.drv", root)
    store.add_perm_root("/nix/store/b.drv", root)

    assert os.readlink(root) == "/nix/store/b.drv"
    assert [entry.name for entry in tmp_path.iterdir()] == ["link"]
