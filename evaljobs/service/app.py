"""FastAPI application exposing job discovery over HTTP."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..errors import EvalJobsError, ExpressionLoadError
from ..orchestrator import EvalOutcome, Orchestrator


class EvalRequest(BaseModel):
    expression: str
    auto_args: Dict[str, Any] = Field(default_factory=dict)
    gc_roots_dir: Optional[str] = None
    dry_run: bool = False
    nested: bool = False


class EvalResponse(BaseModel):
    jobs: Dict[str, Any]
    stats: Dict[str, int]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing hydra-eval-jobs."""

    app = FastAPI(title="hydra-eval-jobs", version="0.1.0")

    async def get_orchestrator() -> Orchestrator:
        # One orchestrator (and evaluator) per request; evaluation state is not shared.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/eval", response_model=EvalResponse)
    async def evaluate(
        payload: EvalRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> EvalResponse:
        def _run_eval() -> EvalOutcome:
            return orchestrator.run_eval(
                payload.expression,
                auto_args=payload.auto_args,
                gc_roots_dir=Path(payload.gc_roots_dir) if payload.gc_roots_dir else None,
                dry_run=payload.dry_run,
            )

        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, _run_eval)
        return EvalResponse(
            jobs=outcome.document.to_json(nested=payload.nested),
            stats=outcome.stats,
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ExpressionLoadError)
    async def load_error_handler(_: Any, exc: ExpressionLoadError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(EvalJobsError)
    async def eval_error_handler(_: Any, exc: EvalJobsError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


def main() -> None:  # pragma: no cover - console script
    """Console script entry point for service mode."""
    parser = argparse.ArgumentParser(
        prog="hydra-eval-jobs-service",
        description="Serve job discovery over HTTP.",
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()
    run_service(args.host, args.port)
