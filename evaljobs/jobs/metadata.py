"""Metadata extraction from a job's ``meta`` set."""

from __future__ import annotations

from typing import Any, List

from ..evaluator import DrvInfo, Evaluator, ValueKind

_SHORT_NAME = "shortName"
_SEPARATOR = ", "


def query_meta_strings(evaluator: Evaluator, drv: DrvInfo, name: str) -> str:
    """Flatten ``meta.<name>`` into a comma separated string.

    Strings are taken as they are, lists are flattened in order, and sets
    contribute their ``shortName``. A set without ``shortName`` contributes
    nothing, even when it holds further lists. Other values are forced and
    then ignored.
    """
    fragments: List[str] = []

    def _collect(value: Any) -> None:
        forced = evaluator.force(value)
        kind = evaluator.kind_of(forced)
        if kind is ValueKind.STRING:
            fragments.append(str(forced))
        elif kind is ValueKind.LIST:
            for item in evaluator.list_items(forced):
                _collect(item)
        elif kind is ValueKind.ATTRS:
            short_name = evaluator.get_attr(forced, _SHORT_NAME)
            if short_name is not None:
                fragments.append(evaluator.force_string(short_name))

    value = drv.query_meta(name)
    if value is not None:
        _collect(value)
    return _SEPARATOR.join(fragments)


def query_meta_string(evaluator: Evaluator, drv: DrvInfo, name: str) -> str:
    value = drv.query_meta(name)
    if value is None:
        return ""
    forced = evaluator.force(value)
    if evaluator.kind_of(forced) is not ValueKind.STRING:
        return ""
    return str(forced)


def query_meta_int(evaluator: Evaluator, drv: DrvInfo, name: str, default: int) -> int:
    value = drv.query_meta(name)
    if value is None:
        return default
    forced = evaluator.force(value)
    kind = evaluator.kind_of(forced)
    if kind is ValueKind.INT:
        return int(forced)
    if kind is ValueKind.STRING:
        # Older expressions set integers as strings.
        try:
            return int(str(forced))
        except ValueError:
            return default
    return default


def query_meta_bool(evaluator: Evaluator, drv: DrvInfo, name: str, default: bool) -> bool:
    value = drv.query_meta(name)
    if value is None:
        return default
    forced = evaluator.force(value)
    kind = evaluator.kind_of(forced)
    if kind is ValueKind.BOOL:
        return bool(forced)
    if kind is ValueKind.STRING:
        if forced == "true":
            return True
        if forced == "false":
            return False
    return default


__all__ = [
    "query_meta_bool",
    "query_meta_int",
    "query_meta_string",
    "query_meta_strings",
]
