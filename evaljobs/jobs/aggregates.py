"""Constituent resolution for aggregate jobs."""

from __future__ import annotations

from typing import Any, Optional, Set

from ..evaluator import ContextKind, DrvInfo, Evaluator, MissingAttributeError

AGGREGATE_MARKER = "_hydraAggregate"
CONSTITUENTS = "constituents"


def is_aggregate(evaluator: Evaluator, drv: DrvInfo) -> bool:
    marker = evaluator.get_attr(drv.value, AGGREGATE_MARKER)
    return marker is not None and evaluator.force_bool(marker)


def constituent_drv_paths(evaluator: Evaluator, constituents: Any) -> Set[str]:
    """Return the derivation paths ``constituents`` refers to through its string context."""
    coerced = evaluator.coerce_to_string(constituents)
    return {
        marker.path for marker in coerced.context if marker.kind is ContextKind.OUTPUT
    }


def resolve_constituents(evaluator: Evaluator, drv: DrvInfo) -> Optional[str]:
    """Return the space separated constituents of an aggregate job, or None.

    Returns None without touching ``constituents`` when the job is not an
    aggregate.
    """
    if not is_aggregate(evaluator, drv):
        return None
    constituents = evaluator.get_attr(drv.value, CONSTITUENTS)
    if constituents is None:
        raise MissingAttributeError(
            "derivation must have a 'constituents' attribute", CONSTITUENTS
        )
    return " ".join(sorted(constituent_drv_paths(evaluator, constituents)))


__all__ = [
    "AGGREGATE_MARKER",
    "CONSTITUENTS",
    "constituent_drv_paths",
    "is_aggregate",
    "resolve_constituents",
]
