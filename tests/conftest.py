from __future__ import annotations

from pathlib import Path

import pytest

from evaljobs.evaluator import PythonEvaluator
from evaljobs.interrupt import InterruptFlag
from tests._fixtures.release_builder import ReleaseBuilder


@pytest.fixture
def release_builder(tmp_path: Path) -> ReleaseBuilder:
    """Provide a release expression builder rooted at the pytest tmp_path."""
    return ReleaseBuilder(tmp_path)


@pytest.fixture
def interrupt() -> InterruptFlag:
    return InterruptFlag()


@pytest.fixture
def evaluator(interrupt: InterruptFlag) -> PythonEvaluator:
    return PythonEvaluator(interrupt)
