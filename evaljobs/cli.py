"""CLI entrypoint for hydra-eval-jobs."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence, TextIO

import yaml

from .config import ConfigError, load_config, locate_config
from .errors import EvalJobsError
from .interrupt import InterruptFlag
from .logging import configure_logging, get_logger, log_stats
from .orchestrator import Orchestrator


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hydra-eval-jobs",
        description="Discover the jobs of a release expression and print them as JSON.",
    )
    parser.add_argument(
        "expression",
        nargs="?",
        help="Path to the release expression (a directory means its default.py).",
    )
    parser.add_argument(
        "--gc-roots-dir",
        type=Path,
        help="Directory in which to register a root for every job's derivation.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Evaluate without registering roots.",
    )
    parser.add_argument(
        "--arg",
        nargs=2,
        action="append",
        default=[],
        metavar=("NAME", "EXPR"),
        help="Pass NAME to auto-called functions; EXPR is parsed as YAML.",
    )
    parser.add_argument(
        "--argstr",
        nargs=2,
        action="append",
        default=[],
        metavar=("NAME", "STRING"),
        help="Pass NAME to auto-called functions as a literal string.",
    )
    parser.add_argument(
        "-I",
        "--include",
        action="append",
        default=[],
        type=Path,
        help="Add a directory to the search path used while loading the expression.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Configuration file or directory containing hydra-eval-jobs.yml.",
    )
    parser.add_argument(
        "--nested",
        action="store_true",
        help="Emit nested objects per attribute path segment instead of dotted keys.",
    )
    parser.add_argument(
        "--show-stats",
        action="store_true",
        default=None,
        help="Log evaluation statistics when done.",
    )
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file.")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    return parser


def _auto_args(args: argparse.Namespace, base: Dict[str, Any]) -> Dict[str, Any]:
    auto_args = dict(base)
    for name, expr in args.arg:
        try:
            auto_args[name] = yaml.safe_load(expr)
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot parse value of argument '{name}': {exc}") from exc
    for name, value in args.argstr:
        auto_args[name] = value
    return auto_args


def main(argv: Sequence[str] | None = None, *, stdout: TextIO | None = None) -> int:
    """CLI entrypoint; returns the process exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    out = stdout or sys.stdout

    if not args.expression:
        parser.error("no expression specified")

    expression = Path(args.expression)
    try:
        config = load_config(locate_config(args.config, expression))
    except ConfigError as exc:
        configure_logging(verbose=bool(args.verbose))
        get_logger().error("%s", exc)
        return 1

    configure_logging(
        verbose=bool(args.verbose),
        log_file=args.log_file or config.log_file,
    )
    logger = get_logger("cli")

    interrupt = InterruptFlag()
    interrupt.install()
    orchestrator = Orchestrator(interrupt=interrupt)

    include: List[Path] = list(args.include) + list(config.include)
    try:
        outcome = orchestrator.run_eval(
            expression,
            auto_args=_auto_args(args, config.auto_args),
            gc_roots_dir=args.gc_roots_dir or config.gc_roots_dir,
            dry_run=args.dry_run if args.dry_run is not None else config.dry_run,
            include=include,
            recursion_limit=config.evaluator.recursion_limit,
        )
    except (FileNotFoundError, EvalJobsError, ConfigError) as exc:
        logger.error("%s", exc)
        return 1
    except RecursionError:
        logger.error("stack overflow; raise evaluator.recursion_limit")
        return 1
    finally:
        interrupt.uninstall()

    json.dump(outcome.document.to_json(nested=args.nested), out, indent=2)
    out.write("\n")
    out.flush()

    show_stats = args.show_stats if args.show_stats is not None else config.evaluator.show_stats
    if show_stats:
        log_stats(logger, outcome.stats)
    return 0


def run() -> None:
    """Console script wrapper around :func:`main`."""
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
