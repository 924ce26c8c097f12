"""Evaluator for release expressions written as Python files."""

from __future__ import annotations

import inspect
import runpy
import sys
import threading
from collections.abc import Mapping as MappingABC
from pathlib import Path, PurePath
from typing import Any, Callable, Dict, Iterator, List, Mapping, Sequence, Tuple

from ..interrupt import InterruptFlag
from .base import (
    CoercedString,
    ContextMarker,
    EvalJobsError,
    EvaluationFailure,
    Evaluator,
    ExpressionLoadError,
    TypeMismatchError,
    ValueKind,
)
from .values import ContextString, Thunk

_DEFAULT_FILENAME = "default.py"
_ROOT_BINDING = "jobs"

# sys.path and sys.modules are process-wide; loads must not interleave.
_LOAD_LOCK = threading.Lock()


def resolve_expression_path(path: str | Path) -> Path:
    """Return the file a release expression argument refers to."""
    candidate = Path(path).expanduser()
    if candidate.is_dir():
        candidate = candidate / _DEFAULT_FILENAME
    if not candidate.exists():
        raise FileNotFoundError(f"release expression not found: {candidate}")
    return candidate.resolve()


def load_expression(path: str | Path, include: Sequence[str | Path] = ()) -> Any:
    """Execute a release expression file and return its ``jobs`` binding."""
    expr_path = resolve_expression_path(path)
    search_path = [str(Path(entry).expanduser().resolve()) for entry in include]
    search_path.append(str(expr_path.parent))
    with _LOAD_LOCK:
        saved = list(sys.path)
        loaded = set(sys.modules)
        sys.path[:0] = search_path
        try:
            namespace = runpy.run_path(str(expr_path), run_name="__release__")
        except (EvalJobsError, RecursionError):
            raise
        except Exception as exc:
            raise ExpressionLoadError(
                f"cannot load release expression {expr_path}: {type(exc).__name__}: {exc}"
            ) from exc
        finally:
            sys.path[:] = saved
            _forget_release_modules(loaded, search_path)

    if _ROOT_BINDING not in namespace:
        raise ExpressionLoadError(
            f"release expression {expr_path} does not define `{_ROOT_BINDING}'"
        )
    return namespace[_ROOT_BINDING]


def _forget_release_modules(loaded: set[str], search_path: Sequence[str]) -> None:
    """Drop modules imported from the release search path during a load.

    The next load may use another expression with helper modules of the same
    name, so they must be imported afresh.
    """
    roots = [Path(entry) for entry in search_path]
    for name in set(sys.modules) - loaded:
        origin = getattr(sys.modules.get(name), "__file__", None)
        if origin is None:
            continue
        origin_path = Path(origin).resolve()
        if any(origin_path.is_relative_to(root) for root in roots):
            del sys.modules[name]


class PythonEvaluator(Evaluator):
    """Evaluates Python values using the lazy conventions of :mod:`.values`."""

    def __init__(self, interrupt: InterruptFlag | None = None) -> None:
        super().__init__()
        self.interrupt = interrupt or InterruptFlag()

    def force(self, value: Any) -> Any:
        while isinstance(value, Thunk):
            if not value.forced:
                self.stats.thunks_forced += 1
            value = value.force()
        return value

    def kind_of(self, value: Any) -> ValueKind:
        value = self.force(value)
        if value is None:
            return ValueKind.NULL
        if isinstance(value, bool):
            return ValueKind.BOOL
        if isinstance(value, int):
            return ValueKind.INT
        if isinstance(value, float):
            return ValueKind.FLOAT
        if isinstance(value, str):
            return ValueKind.STRING
        if isinstance(value, PurePath):
            return ValueKind.PATH
        if isinstance(value, (list, tuple)):
            return ValueKind.LIST
        if isinstance(value, MappingABC):
            return ValueKind.ATTRS
        if callable(value):
            return ValueKind.FUNCTION
        return ValueKind.EXTERNAL

    def attrs(self, value: Any) -> Iterator[Tuple[str, Any]]:
        mapping = self._expect_attrs(value)
        self.stats.sets_enumerated += 1
        for name in mapping:
            if not isinstance(name, str):
                raise TypeMismatchError(
                    f"attribute name {name!r} is not a string", self.kind_of(name)
                )
        for name in sorted(mapping):
            yield name, mapping[name]

    def list_items(self, value: Any) -> List[Any]:
        value = self.force(value)
        kind = self.kind_of(value)
        if kind is not ValueKind.LIST:
            raise TypeMismatchError(f"value is {kind.description} while a list was expected", kind)
        return list(value)

    def get_attr(self, value: Any, name: str) -> Any:
        return self._expect_attrs(value).get(name)

    def auto_call(self, value: Any, auto_args: Mapping[str, Any]) -> Any:
        value = self.force(value)
        if self.kind_of(value) is not ValueKind.FUNCTION:
            return value
        kwargs = self._auto_arguments(value, auto_args)
        if kwargs is None:
            return value
        return self.force(self.call(value, **kwargs))

    def call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Call a function from the release expression."""
        self.stats.function_calls += 1
        try:
            return fn(*args, **kwargs)
        except (EvalJobsError, RecursionError):
            raise
        except Exception as exc:
            raise EvaluationFailure(f"{type(exc).__name__}: {exc}") from exc

    def coerce_to_string(self, value: Any) -> CoercedString:
        context: set[ContextMarker] = set()
        text = self._coerce(value, context)
        self.stats.strings_coerced += 1
        return CoercedString(text=text, context=frozenset(context))

    def check_interrupt(self) -> None:
        self.interrupt.check()

    # ------------------------------------------------------------------
    # Internal helpers

    def _expect_attrs(self, value: Any) -> Mapping[str, Any]:
        value = self.force(value)
        kind = self.kind_of(value)
        if kind is not ValueKind.ATTRS:
            raise TypeMismatchError(f"value is {kind.description} while a set was expected", kind)
        return value

    def _auto_arguments(
        self, fn: Callable[..., Any], auto_args: Mapping[str, Any]
    ) -> Dict[str, Any] | None:
        try:
            signature = inspect.signature(fn)
        except (TypeError, ValueError):
            return None

        kwargs: Dict[str, Any] = {}
        accepts_any = False
        for parameter in signature.parameters.values():
            if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.VAR_POSITIONAL):
                return None
            if parameter.kind is parameter.VAR_KEYWORD:
                accepts_any = True
                continue
            if parameter.name in auto_args:
                kwargs[parameter.name] = auto_args[parameter.name]
            elif parameter.default is parameter.empty:
                raise EvaluationFailure(
                    "cannot auto-call a function that has an argument without a default "
                    f"value ('{parameter.name}')"
                )
        if accepts_any:
            for name, arg in auto_args.items():
                kwargs.setdefault(name, arg)
        return kwargs

    def _coerce(self, value: Any, context: set[ContextMarker]) -> str:
        value = self.force(value)
        kind = self.kind_of(value)
        if kind is ValueKind.STRING:
            if isinstance(value, ContextString):
                context.update(value.context)
            return str(value)
        if kind is ValueKind.PATH:
            return str(value)
        if kind is ValueKind.NULL:
            return ""
        if kind is ValueKind.BOOL:
            return "1" if value else ""
        if kind in (ValueKind.INT, ValueKind.FLOAT):
            return str(value)
        if kind is ValueKind.LIST:
            parts = []
            for item in value:
                forced = self.force(item)
                if self.kind_of(forced) is ValueKind.LIST and not forced:
                    continue
                parts.append(self._coerce(forced, context))
            return " ".join(parts)
        if kind is ValueKind.ATTRS:
            to_string = value.get("__toString")
            if to_string is not None:
                return self._coerce(self.call(self.force(to_string), value), context)
            out_path = value.get("outPath")
            if out_path is not None:
                return self._coerce(out_path, context)
        raise TypeMismatchError(f"cannot coerce {kind.description} to a string", kind)


__all__ = ["PythonEvaluator", "load_expression", "resolve_expression_path"]
