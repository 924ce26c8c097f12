"""Depth-first discovery of jobs in a release expression."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from ..document import ResultDocument
from ..evaluator import DrvInfo, EvalError, Evaluator
from ..logging import get_logger
from ..models import (
    DEFAULT_MAX_SILENT,
    DEFAULT_SCHEDULING_PRIORITY,
    DEFAULT_TIMEOUT,
    AttrPath,
    Entry,
    ErrorDescriptor,
    JobDescriptor,
)
from ..stores.gc_roots import RootRegistrar
from .aggregates import resolve_constituents
from .classifier import NodeKind, classify
from .metadata import (
    query_meta_bool,
    query_meta_int,
    query_meta_string,
    query_meta_strings,
)


@dataclass
class WalkStats:
    """Counters collected while walking."""

    jobs: int = 0
    errors: int = 0
    namespaces: int = 0
    skipped: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "jobs": self.jobs,
            "errors": self.errors,
            "namespaces": self.namespaces,
            "skipped": self.skipped,
        }


class JobWalker:
    """Walks the attribute tree and turns every reachable derivation into a job.

    Each attribute path is visited in its own frame. Recoverable evaluation
    errors raised while visiting a path are recorded as an error entry for
    that path only; whatever the frame had collected for its children is
    dropped with it. Fatal errors (interruption, root registration failures)
    propagate out of :meth:`walk`.
    """

    def __init__(
        self,
        evaluator: Evaluator,
        *,
        auto_args: Mapping[str, Any] | None = None,
        registrar: RootRegistrar | None = None,
    ) -> None:
        self.evaluator = evaluator
        self.auto_args = dict(auto_args or {})
        self.registrar = registrar or RootRegistrar(None)
        self.stats = WalkStats()
        self.logger = get_logger("walker")

    def walk(self, root: Any) -> ResultDocument:
        document = ResultDocument()
        document.extend(self.visit(AttrPath.root(), root))
        self.logger.debug(
            "Discovered %d job(s) with %d error(s)", self.stats.jobs, self.stats.errors
        )
        return document

    def visit(self, path: AttrPath, value: Any) -> List[Entry]:
        """Return the entries found at and below ``path``."""
        self.evaluator.check_interrupt()
        self.logger.debug("at path `%s'", path.dotted)
        try:
            return self._visit(path, value)
        except EvalError as exc:
            self.stats.errors += 1
            self.logger.debug("Error at `%s': %s", path.dotted, exc)
            return [Entry(path, ErrorDescriptor(str(exc)))]

    def _visit(self, path: AttrPath, value: Any) -> List[Entry]:
        called = self.evaluator.auto_call(value, self.auto_args)
        node = classify(self.evaluator, called)

        if node.drv is not None:
            job = self._build_job(node.drv)
            self.stats.jobs += 1
            return [Entry(path, job)]

        if node.kind is NodeKind.NAMESPACE:
            self.stats.namespaces += 1
            entries: List[Entry] = []
            for name, member in self.evaluator.attrs(node.value):
                entries.extend(self.visit(path.child(name), member))
            return entries

        self.stats.skipped += 1
        return []

    def _build_job(self, drv: DrvInfo) -> JobDescriptor:
        evaluator = self.evaluator
        outputs = drv.outputs()
        drv_path = drv.drv_path()
        job = JobDescriptor(
            nix_name=drv.name(),
            system=drv.system(),
            drv_path=drv_path,
            description=query_meta_string(evaluator, drv, "description"),
            license=query_meta_strings(evaluator, drv, "license"),
            homepage=query_meta_string(evaluator, drv, "homepage"),
            maintainers=query_meta_strings(evaluator, drv, "maintainers"),
            scheduling_priority=query_meta_int(
                evaluator, drv, "schedulingPriority", DEFAULT_SCHEDULING_PRIORITY
            ),
            timeout=query_meta_int(evaluator, drv, "timeout", DEFAULT_TIMEOUT),
            max_silent=query_meta_int(evaluator, drv, "maxSilent", DEFAULT_MAX_SILENT),
            is_channel=query_meta_bool(evaluator, drv, "isHydraChannel", False),
            constituents=resolve_constituents(evaluator, drv),
            outputs=outputs,
        )
        self.registrar.register(drv_path)
        return job


__all__ = ["JobWalker", "WalkStats"]
