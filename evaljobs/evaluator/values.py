"""Building blocks for Python release expressions.

A release expression is an ordinary Python file binding ``jobs``. Laziness
comes from :func:`lazy`: a thunk is only forced when the walker reaches it,
so a broken job cannot affect its siblings.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, FrozenSet, Iterable, Mapping, Optional

from .base import (
    ContextKind,
    ContextMarker,
    EvalJobsError,
    EvaluationFailure,
    ThrownError,
)


class ContextString(str):
    """A string that remembers which store paths it refers to."""

    context: FrozenSet[ContextMarker]

    def __new__(cls, text: str, context: Iterable[ContextMarker | str] = ()) -> "ContextString":
        instance = super().__new__(cls, text)
        instance.context = frozenset(
            marker if isinstance(marker, ContextMarker) else ContextMarker.parse(marker)
            for marker in context
        )
        return instance

    def __repr__(self) -> str:
        return f"ContextString({str.__repr__(self)}, context={sorted(m.encode() for m in self.context)!r})"


class Thunk:
    """A memoised, lazily computed value."""

    _UNFORCED = object()

    __slots__ = ("_fn", "_value", "_forcing")

    def __init__(self, fn: Callable[[], Any]) -> None:
        self._fn = fn
        self._value: Any = Thunk._UNFORCED
        self._forcing = False

    @property
    def forced(self) -> bool:
        return self._value is not Thunk._UNFORCED

    def force(self) -> Any:
        if self._value is not Thunk._UNFORCED:
            return self._value
        if self._forcing:
            raise EvaluationFailure("infinite recursion encountered")
        self._forcing = True
        try:
            value = self._fn()
        except (EvalJobsError, RecursionError):
            raise
        except Exception as exc:
            raise EvaluationFailure(f"{type(exc).__name__}: {exc}") from exc
        finally:
            self._forcing = False
        self._value = value
        return value

    def __repr__(self) -> str:
        if self.forced:
            return f"Thunk(forced={self._value!r})"
        return "Thunk(<unforced>)"


def lazy(fn: Callable[[], Any]) -> Thunk:
    """Defer ``fn`` until the value is needed."""
    return Thunk(fn)


def throw(message: str) -> Any:
    """Abort evaluation of the current value with ``message``."""
    raise ThrownError(message)


def derivation(
    name: str,
    *,
    drv_path: str,
    outputs: Mapping[str, str],
    system: Optional[str] = None,
    meta: Optional[Mapping[str, Any]] = None,
    **attrs: Any,
) -> Dict[str, Any]:
    """Return a derivation set in the shape the job walker recognises.

    ``outputs`` maps output names to store paths; the first entry becomes
    ``outPath``. Output paths carry a ``!<output>!<drvPath>`` context so that
    referring to them from an aggregate's ``constituents`` records the
    derivation.
    """
    if not outputs:
        raise ValueError("a derivation needs at least one output")

    result: Dict[str, Any] = {
        "type": "derivation",
        "name": name,
        "drvPath": ContextString(drv_path, [ContextMarker(ContextKind.ALL_OUTPUTS, drv_path)]),
        "outputs": list(outputs),
    }
    if system is not None:
        result["system"] = system
    if meta is not None:
        result["meta"] = dict(meta)

    for output_name, out_path in outputs.items():
        result[output_name] = {
            "outPath": ContextString(
                out_path, [ContextMarker(ContextKind.OUTPUT, drv_path, output_name)]
            ),
            "outputName": output_name,
        }
    result["outPath"] = result[next(iter(outputs))]["outPath"]
    result.update(attrs)
    return result


def aggregate(
    name: str,
    *,
    drv_path: str,
    constituents: Iterable[Any],
    outputs: Optional[Mapping[str, str]] = None,
    system: Optional[str] = None,
    meta: Optional[Mapping[str, Any]] = None,
    **attrs: Any,
) -> Dict[str, Any]:
    """Return a derivation that bundles ``constituents`` into one job."""
    return derivation(
        name,
        drv_path=drv_path,
        outputs=outputs or {"out": drv_path.removesuffix(".drv")},
        system=system,
        meta=meta,
        _hydraAggregate=True,
        constituents=list(constituents),
        **attrs,
    )


__all__ = ["ContextString", "Thunk", "aggregate", "derivation", "lazy", "throw"]
