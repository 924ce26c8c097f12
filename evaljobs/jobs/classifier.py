"""Classification of forced values into jobs, namespaces and placeholders."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..evaluator import (
    DrvInfo,
    Evaluator,
    MissingAttributeError,
    TypeMismatchError,
    ValueKind,
)

UNKNOWN_SYSTEM = "unknown"


class NodeKind(str, Enum):
    JOB = "job"
    NAMESPACE = "namespace"
    SKIP = "skip"


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one value of the job tree."""

    kind: NodeKind
    value: Any
    drv: Optional[DrvInfo] = None


def classify(evaluator: Evaluator, value: Any) -> Classification:
    """Decide what the walker should do with ``value``.

    Raises :class:`TypeMismatchError` for strings, lists and other scalars,
    and :class:`MissingAttributeError` for a derivation without a platform.
    """
    forced = evaluator.force(value)
    kind = evaluator.kind_of(forced)

    if kind is ValueKind.ATTRS:
        drv = evaluator.get_derivation(forced)
        if drv is None:
            return Classification(NodeKind.NAMESPACE, forced)
        if drv.system() == UNKNOWN_SYSTEM:
            raise MissingAttributeError(
                "derivation must have a 'system' attribute", "system"
            )
        return Classification(NodeKind.JOB, forced, drv)

    if kind is ValueKind.NULL:
        return Classification(NodeKind.SKIP, forced)

    raise TypeMismatchError(f"unsupported value: {_describe(evaluator, forced, kind)}", kind)


def _describe(evaluator: Evaluator, value: Any, kind: ValueKind) -> str:
    if kind is ValueKind.STRING:
        text = str(value)
        if len(text) > 60:
            text = text[:57] + "..."
        return f'{kind.description} "{text}"'
    if kind in (ValueKind.BOOL, ValueKind.INT, ValueKind.FLOAT):
        rendered = str(value).lower() if kind is ValueKind.BOOL else str(value)
        return f"{kind.description} {rendered}"
    if kind is ValueKind.LIST:
        return f"{kind.description} of {len(evaluator.list_items(value))} element(s)"
    return kind.description


__all__ = ["Classification", "NodeKind", "UNKNOWN_SYSTEM", "classify"]
