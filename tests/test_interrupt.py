"""Tests for the interruption flag."""

from __future__ import annotations

import signal

import pytest

from evaljobs.errors import Interrupted
from evaljobs.interrupt import InterruptFlag


def test_check_is_silent_until_triggered() -> None:
    flag = InterruptFlag()
    flag.check()

    flag.trigger()
    assert flag.is_set
    with pytest.raises(Interrupted, match="interrupted by the user"):
        flag.check()

    flag.clear()
    flag.check()


def test_installed_handler_sets_flag_and_uninstall_restores() -> None:
    previous = signal.getsignal(signal.SIGUSR1)
    flag = InterruptFlag()
    flag.install([signal.SIGUSR1])
    try:
        signal.raise_signal(signal.SIGUSR1)
        with pytest.raises(Interrupted, match="SIGUSR1"):
            flag.check()
    finally:
        flag.uninstall()

    assert signal.getsignal(signal.SIGUSR1) == previous
