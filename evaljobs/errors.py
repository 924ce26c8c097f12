"""Error taxonomy shared by the evaluator, walker and command line."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .evaluator.base import ValueKind


class EvalJobsError(RuntimeError):
    """Base class for errors that abort the whole discovery run."""


class EvalError(EvalJobsError):
    """Recoverable evaluation error, recorded at the attribute path that raised it."""


class TypeMismatchError(EvalError):
    """A value forced to a kind the caller cannot use."""

    def __init__(self, message: str, kind: "ValueKind | None" = None) -> None:
        super().__init__(message)
        self.kind = kind


class MissingAttributeError(EvalError):
    """A job lacks an attribute it is required to have."""

    def __init__(self, message: str, attribute: str | None = None) -> None:
        super().__init__(message)
        self.attribute = attribute


class EvaluationFailure(EvalError):
    """Forcing, calling or coercing a value failed inside the expression."""


class ThrownError(EvaluationFailure):
    """Raised explicitly by a release expression via ``throw``."""


class Interrupted(EvalJobsError):
    """The run was interrupted by a signal."""


class ExpressionLoadError(EvalJobsError):
    """The release expression could not be loaded."""


__all__ = [
    "EvalError",
    "EvalJobsError",
    "EvaluationFailure",
    "ExpressionLoadError",
    "Interrupted",
    "MissingAttributeError",
    "ThrownError",
    "TypeMismatchError",
]
