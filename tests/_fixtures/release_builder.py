"""Helper utilities for writing throwaway release expressions in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path

_PRELUDE = "from evaljobs.evaluator import aggregate, derivation, lazy, throw\n\n"


class ReleaseBuilder:
    """Writes release expression files below a temporary directory."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "release"
        self.root.mkdir()

    def write(self, source: str, name: str = "release.py", *, prelude: bool = True) -> Path:
        """Write ``source`` (dedented) to ``name`` and return its path."""
        path = self.root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        body = textwrap.dedent(source).lstrip("\n")
        path.write_text((_PRELUDE if prelude else "") + body, encoding="utf-8")
        return path

    def path(self) -> Path:
        return self.root


def drv_path(name: str) -> str:
    """Return a plausible derivation path for ``name``."""
    return f"/nix/store/{'0' * 32}-{name}.drv"


def out_path(name: str) -> str:
    return f"/nix/store/{'1' * 32}-{name}"


__all__ = ["ReleaseBuilder", "drv_path", "out_path"]
