"""Lazy expression evaluation capability consumed by the job walker."""

from .base import (
    CoercedString,
    ContextKind,
    ContextMarker,
    DrvInfo,
    EvalError,
    EvalJobsError,
    EvalStats,
    EvaluationFailure,
    Evaluator,
    ExpressionLoadError,
    Interrupted,
    MissingAttributeError,
    ThrownError,
    TypeMismatchError,
    ValueKind,
)
from .python import PythonEvaluator, load_expression, resolve_expression_path
from .values import ContextString, Thunk, aggregate, derivation, lazy, throw

__all__ = [
    "CoercedString",
    "ContextKind",
    "ContextMarker",
    "ContextString",
    "DrvInfo",
    "EvalError",
    "EvalJobsError",
    "EvalStats",
    "EvaluationFailure",
    "Evaluator",
    "ExpressionLoadError",
    "Interrupted",
    "MissingAttributeError",
    "PythonEvaluator",
    "ThrownError",
    "Thunk",
    "TypeMismatchError",
    "ValueKind",
    "aggregate",
    "derivation",
    "lazy",
    "load_expression",
    "resolve_expression_path",
    "throw",
]
