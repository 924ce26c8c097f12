"""Cooperative interruption for long discovery runs."""

from __future__ import annotations

import signal
import threading
from types import FrameType
from typing import Any, Dict, Iterable

from .errors import Interrupted


class InterruptFlag:
    """Set by a signal handler, checked by the walker before each attribute path."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._signal: int | None = None
        self._previous: Dict[int, Any] = {}

    @property
    def is_set(self) -> bool:
        return self._event.is_set()

    def trigger(self, signum: int | None = None) -> None:
        self._signal = signum
        self._event.set()

    def clear(self) -> None:
        self._signal = None
        self._event.clear()

    def check(self) -> None:
        if self._event.is_set():
            if self._signal is not None:
                raise Interrupted(f"interrupted by signal {signal.Signals(self._signal).name}")
            raise Interrupted("interrupted by the user")

    def install(
        self, signals: Iterable[int] = (signal.SIGINT, signal.SIGTERM)
    ) -> None:
        """Route ``signals`` to this flag; only valid on the main thread."""

        def _handler(signum: int, _frame: FrameType | None) -> None:
            self.trigger(signum)

        for signum in signals:
            self._previous[signum] = signal.signal(signum, _handler)

    def uninstall(self) -> None:
        """Restore the handlers replaced by :meth:`install`."""
        for signum, previous in self._previous.items():
            signal.signal(signum, previous)
        self._previous.clear()


__all__ = ["InterruptFlag"]
