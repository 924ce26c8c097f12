"""Tests for job classification."""

from __future__ import annotations

import pytest

from evaljobs.evaluator import (
    MissingAttributeError,
    PythonEvaluator,
    TypeMismatchError,
    ValueKind,
    derivation,
    lazy,
)
from evaljobs.jobs import NodeKind, classify


def _job(system: str | None = "x86_64-linux") -> dict:
    return derivation(
        "job-1",
        system=system,
        drv_path="/nix/store/j-job-1.drv",
        outputs={"out": "/nix/store/j-job-1"},
    )


def test_derivation_is_a_job(evaluator: PythonEvaluator) -> None:
    result = classify(evaluator, lazy(_job))
    assert result.kind is NodeKind.JOB
    assert result.drv is not None
    assert result.drv.system() == "x86_64-linux"


def test_plain_set_is_a_namespace(evaluator: PythonEvaluator) -> None:
    result = classify(evaluator, {"a": None})
    assert result.kind is NodeKind.NAMESPACE
    assert result.drv is None


def test_null_is_skipped(evaluator: PythonEvaluator) -> None:
    assert classify(evaluator, lazy(lambda: None)).kind is NodeKind.SKIP


@pytest.mark.parametrize(
    ("value", "kind", "fragment"),
    [
        ("hello", ValueKind.STRING, 'a string "hello"'),
        ([1, 2, 3], ValueKind.LIST, "a list of 3 element(s)"),
        (True, ValueKind.BOOL, "a Boolean true"),
        (12, ValueKind.INT, "an integer 12"),
        (lambda x, /: x, ValueKind.FUNCTION, "a function"),
    ],
)
def test_unsupported_values(
    evaluator: PythonEvaluator, value: object, kind: ValueKind, fragment: str
) -> None:
    with pytest.raises(TypeMismatchError) as excinfo:
        classify(evaluator, value)
    assert excinfo.value.kind is kind
    assert str(excinfo.value) == f"unsupported value: {fragment}"


@pytest.mark.parametrize("system", ["unknown", None])
def test_job_without_platform_is_missing_attribute(
    evaluator: PythonEvaluator, system: str | None
) -> None:
    with pytest.raises(MissingAttributeError, match="system") as excinfo:
        classify(evaluator, _job(system))
    assert excinfo.value.attribute == "system"
