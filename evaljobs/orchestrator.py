"""Pipeline orchestration for a single discovery run."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from .document import ResultDocument
from .evaluator import PythonEvaluator, load_expression
from .interrupt import InterruptFlag
from .jobs import JobWalker
from .logging import get_logger
from .stores import RootRegistrar, RootStore


@dataclass
class EvalOutcome:
    """Result of evaluating a release expression."""

    document: ResultDocument
    stats: Dict[str, int]


class Orchestrator:
    """Loads a release expression and discovers its jobs."""

    def __init__(
        self,
        root_store: RootStore | None = None,
        interrupt: InterruptFlag | None = None,
    ) -> None:
        self.root_store = root_store
        self.interrupt = interrupt or InterruptFlag()
        self.logger = get_logger("orchestrator")

    def run_eval(
        self,
        expression: str | Path,
        *,
        auto_args: Optional[Mapping[str, Any]] = None,
        gc_roots_dir: Optional[Path] = None,
        dry_run: bool = False,
        include: Sequence[str | Path] = (),
        recursion_limit: Optional[int] = None,
    ) -> EvalOutcome:
        """Evaluate ``expression`` and return every job found in it."""
        if recursion_limit is not None and recursion_limit > sys.getrecursionlimit():
            self.logger.debug("Raising recursion limit to %d", recursion_limit)
            sys.setrecursionlimit(recursion_limit)

        if gc_roots_dir is None:
            self.logger.warning("`--gc-roots-dir' not specified")
        elif dry_run:
            self.logger.info("Dry-run: roots will not be registered in %s", gc_roots_dir)

        self.logger.info("Evaluating %s", expression)
        root = load_expression(expression, include)

        evaluator = PythonEvaluator(self.interrupt)
        registrar = RootRegistrar(gc_roots_dir, self.root_store, dry_run=dry_run)
        walker = JobWalker(evaluator, auto_args=auto_args, registrar=registrar)
        document = walker.walk(root)

        stats: Dict[str, int] = {}
        stats.update(evaluator.stats.as_dict())
        stats.update(walker.stats.as_dict())
        stats["rootsRegistered"] = registrar.registered
        self.logger.info(
            "Found %d job(s), %d error(s)", walker.stats.jobs, walker.stats.errors
        )
        return EvalOutcome(document=document, stats=stats)


__all__ = ["EvalOutcome", "Orchestrator"]
