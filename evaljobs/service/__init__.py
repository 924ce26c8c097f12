"""HTTP service mode for hydra-eval-jobs."""

from .app import create_app, run_service

__all__ = ["create_app", "run_service"]
