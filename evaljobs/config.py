"""Configuration loading for hydra-eval-jobs (hydra-eval-jobs.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = "hydra-eval-jobs.yml"
CONFIG_ENV_VAR = "HYDRA_EVAL_JOBS_CONFIG"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class EvaluatorConfig:
    """Evaluator tuning knobs."""

    recursion_limit: Optional[int] = None
    show_stats: bool = False


@dataclass
class EvalJobsConfig:
    """Represents the settings defined in hydra-eval-jobs.yml."""

    root: Path
    gc_roots_dir: Optional[Path] = None
    dry_run: bool = False
    include: List[Path] = field(default_factory=list)
    auto_args: Dict[str, Any] = field(default_factory=dict)
    evaluator: EvaluatorConfig = field(default_factory=EvaluatorConfig)
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> EvalJobsConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return EvalJobsConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    gc_roots_dir = _as_str(data.get("gc_roots_dir"))
    log_file = _as_str(data.get("log_file"))

    auto_args_data = data.get("auto_args")
    if auto_args_data is not None and not isinstance(auto_args_data, dict):
        raise ConfigError("auto_args must be a mapping of argument names to values")
    auto_args = {str(key): value for key, value in (auto_args_data or {}).items()}

    evaluator_data = _as_dict(data.get("evaluator"))
    evaluator = EvaluatorConfig()
    if evaluator_data:
        evaluator.recursion_limit = _as_int(evaluator_data.get("recursion_limit"))
        evaluator.show_stats = _as_bool(evaluator_data.get("show_stats")) or False

    return EvalJobsConfig(
        root=root,
        gc_roots_dir=_resolve_relative(root, gc_roots_dir),
        dry_run=_as_bool(data.get("dry_run")) or False,
        include=[root / entry for entry in _as_str_list(data.get("include"))],
        auto_args=auto_args,
        evaluator=evaluator,
        log_file=_resolve_relative(root, log_file),
    )


def locate_config(
    explicit: Optional[Path],
    expression: Optional[Path],
    environ: Mapping[str, str] = os.environ,
) -> Path:
    """Pick the configuration location: flag, then environment, then the expression's directory."""
    if explicit is not None:
        return explicit
    from_env = environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    if expression is not None:
        expression = expression.expanduser()
        return expression if expression.is_dir() else expression.parent
    return Path.cwd()


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _resolve_relative(root: Path, value: Optional[str]) -> Optional[Path]:
    if not value:
        return None
    path = Path(value).expanduser()
    return path if path.is_absolute() else root / path


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "ConfigError",
    "EvalJobsConfig",
    "EvaluatorConfig",
    "load_config",
    "locate_config",
]
