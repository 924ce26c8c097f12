"""Evaluator capability contract and value kinds."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Optional, Tuple

from ..errors import (
    EvalError,
    EvalJobsError,
    EvaluationFailure,
    ExpressionLoadError,
    Interrupted,
    MissingAttributeError,
    ThrownError,
    TypeMismatchError,
)


class ValueKind(str, Enum):
    """Kind of a forced value."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    PATH = "path"
    LIST = "list"
    ATTRS = "set"
    FUNCTION = "lambda"
    EXTERNAL = "external"

    @property
    def description(self) -> str:
        return _KIND_DESCRIPTIONS[self]


_KIND_DESCRIPTIONS = {
    ValueKind.NULL: "null",
    ValueKind.BOOL: "a Boolean",
    ValueKind.INT: "an integer",
    ValueKind.FLOAT: "a float",
    ValueKind.STRING: "a string",
    ValueKind.PATH: "a path",
    ValueKind.LIST: "a list",
    ValueKind.ATTRS: "a set",
    ValueKind.FUNCTION: "a function",
    ValueKind.EXTERNAL: "an external value",
}


class ContextKind(str, Enum):
    """How a string depends on a store path."""

    PLAIN = "plain"
    OUTPUT = "output"
    ALL_OUTPUTS = "all-outputs"


@dataclass(frozen=True, order=True)
class ContextMarker:
    """Structured string-context entry.

    Raw markers are encoded as ``!<output>!<drvPath>`` for a derivation
    output, ``=<drvPath>`` for every output of a derivation, and a bare
    path otherwise.
    """

    kind: ContextKind
    path: str
    output: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "ContextMarker":
        if raw.startswith("!"):
            index = raw.find("!", 1)
            if index == -1:
                raise ValueError(f"malformed string context marker '{raw}'")
            return cls(kind=ContextKind.OUTPUT, path=raw[index + 1 :], output=raw[1:index])
        if raw.startswith("="):
            return cls(kind=ContextKind.ALL_OUTPUTS, path=raw[1:])
        return cls(kind=ContextKind.PLAIN, path=raw)

    def encode(self) -> str:
        if self.kind is ContextKind.OUTPUT:
            return f"!{self.output}!{self.path}"
        if self.kind is ContextKind.ALL_OUTPUTS:
            return f"={self.path}"
        return self.path


@dataclass(frozen=True)
class CoercedString:
    """Result of coercing a value to a string while tracking its context."""

    text: str
    context: FrozenSet[ContextMarker] = frozenset()


@dataclass
class EvalStats:
    """Counters reported after a run when statistics are enabled."""

    thunks_forced: int = 0
    function_calls: int = 0
    sets_enumerated: int = 0
    strings_coerced: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "thunksForced": self.thunks_forced,
            "functionCalls": self.function_calls,
            "setsEnumerated": self.sets_enumerated,
            "stringsCoerced": self.strings_coerced,
        }


class Evaluator(ABC):
    """Operations the job walker needs from a lazy expression evaluator.

    Values handed to these methods may be unforced; every method that needs
    the evaluated form forces first. Errors caused by the expression content
    are raised as :class:`EvalError` subclasses.
    """

    def __init__(self) -> None:
        self.stats = EvalStats()

    @abstractmethod
    def force(self, value: Any) -> Any:
        """Force ``value`` to weak head normal form and return it."""

    @abstractmethod
    def kind_of(self, value: Any) -> ValueKind:
        """Return the kind of ``value``, forcing it if needed."""

    @abstractmethod
    def attrs(self, value: Any) -> Iterator[Tuple[str, Any]]:
        """Yield ``(name, unforced member)`` pairs of a set in a stable order."""

    @abstractmethod
    def list_items(self, value: Any) -> List[Any]:
        """Return the unforced elements of a list."""

    @abstractmethod
    def get_attr(self, value: Any, name: str) -> Any:
        """Return the unforced member ``name`` of a set, or ``None`` if absent."""

    @abstractmethod
    def auto_call(self, value: Any, auto_args: Mapping[str, Any]) -> Any:
        """Call ``value`` with default arguments if it is a function."""

    @abstractmethod
    def coerce_to_string(self, value: Any) -> CoercedString:
        """Coerce ``value`` to a string, accumulating its context markers."""

    @abstractmethod
    def check_interrupt(self) -> None:
        """Raise :class:`Interrupted` if the run should stop."""

    def force_string(self, value: Any) -> str:
        forced = self.force(value)
        kind = self.kind_of(forced)
        if kind is not ValueKind.STRING:
            raise TypeMismatchError(
                f"value is {kind.description} while a string was expected", kind
            )
        return str(forced)

    def force_bool(self, value: Any) -> bool:
        forced = self.force(value)
        kind = self.kind_of(forced)
        if kind is not ValueKind.BOOL:
            raise TypeMismatchError(
                f"value is {kind.description} while a Boolean was expected", kind
            )
        return bool(forced)

    def is_derivation(self, value: Any) -> bool:
        """Return True for a set whose ``type`` member forces to ``"derivation"``."""
        forced = self.force(value)
        if self.kind_of(forced) is not ValueKind.ATTRS:
            return False
        type_value = self.get_attr(forced, "type")
        if type_value is None:
            return False
        forced_type = self.force(type_value)
        return self.kind_of(forced_type) is ValueKind.STRING and forced_type == "derivation"

    def get_derivation(self, value: Any) -> "DrvInfo | None":
        forced = self.force(value)
        if not self.is_derivation(forced):
            return None
        return DrvInfo(self, forced)


@dataclass
class DrvInfo:
    """Read-only view over a derivation set."""

    evaluator: Evaluator
    value: Any
    _cache: Dict[str, Any] = field(default_factory=dict, repr=False)

    def name(self) -> str:
        if "name" not in self._cache:
            member = self.evaluator.get_attr(self.value, "name")
            if member is None:
                raise MissingAttributeError("derivation name missing", "name")
            self._cache["name"] = self.evaluator.force_string(member)
        return self._cache["name"]

    def system(self) -> str:
        if "system" not in self._cache:
            member = self.evaluator.get_attr(self.value, "system")
            self._cache["system"] = (
                "unknown" if member is None else self.evaluator.force_string(member)
            )
        return self._cache["system"]

    def drv_path(self) -> str:
        if "drvPath" not in self._cache:
            member = self.evaluator.get_attr(self.value, "drvPath")
            if member is None:
                raise MissingAttributeError(
                    "derivation must have a 'drvPath' attribute", "drvPath"
                )
            self._cache["drvPath"] = self.evaluator.coerce_to_string(member).text
        return self._cache["drvPath"]

    def outputs(self) -> Dict[str, str]:
        """Return the output name to output path mapping."""
        evaluator = self.evaluator
        names_value = evaluator.get_attr(self.value, "outputs")
        if names_value is None:
            out_path = evaluator.get_attr(self.value, "outPath")
            text = "" if out_path is None else evaluator.coerce_to_string(out_path).text
            return {"out": text}

        names = evaluator.force(names_value)
        kind = evaluator.kind_of(names)
        if kind is not ValueKind.LIST:
            raise TypeMismatchError(
                f"value is {kind.description} while a list was expected", kind
            )
        result: Dict[str, str] = {}
        for item in evaluator.list_items(names):
            output_name = evaluator.force_string(item)
            output = evaluator.get_attr(self.value, output_name)
            if output is None:
                continue
            out_path = evaluator.get_attr(output, "outPath")
            if out_path is None:
                continue
            result[output_name] = evaluator.coerce_to_string(out_path).text
        return result

    def query_meta(self, name: str) -> Any:
        """Return the unforced ``meta.<name>`` member, or ``None``."""
        meta = self.evaluator.get_attr(self.value, "meta")
        if meta is None:
            return None
        return self.evaluator.get_attr(meta, name)


__all__ = [
    "CoercedString",
    "ContextKind",
    "ContextMarker",
    "DrvInfo",
    "EvalError",
    "EvalJobsError",
    "EvalStats",
    "EvaluationFailure",
    "Evaluator",
    "ExpressionLoadError",
    "Interrupted",
    "MissingAttributeError",
    "ThrownError",
    "TypeMismatchError",
    "ValueKind",
]
