"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from evaljobs.stores import RootRegistrationError
from evaljobs.service import create_app
from tests._fixtures.release_builder import ReleaseBuilder


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


def _release(builder: ReleaseBuilder) -> Path:
    return builder.write(
        """
        def jobs(system="x86_64-linux"):
            return {
                "pkgs": {
                    "hello": lazy(lambda: derivation(
                        "hello", system=system, drv_path="/nix/store/hello.drv",
                        outputs={"out": "/nix/store/hello"},
                    )),
                },
                "broken": lazy(lambda: throw("nope")),
            }
        """
    )


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_eval_endpoint(client: TestClient, release_builder: ReleaseBuilder) -> None:
    response = client.post(
        "/eval",
        json={
            "expression": str(_release(release_builder)),
            "auto_args": {"system": "aarch64-linux"},
            "dry_run": True,
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["jobs"]["pkgs.hello"]["system"] == "aarch64-linux"
    assert data["jobs"]["broken"] == {"error": "nope"}
    assert data["stats"]["jobs"] == 1


def test_eval_endpoint_nested(client: TestClient, release_builder: ReleaseBuilder) -> None:
    response = client.post(
        "/eval",
        json={"expression": str(_release(release_builder)), "nested": True},
    )

    assert response.status_code == 200
    assert response.json()["jobs"]["pkgs"]["hello"]["nixName"] == "hello"


def test_missing_expression_is_not_found(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/eval", json={"expression": str(tmp_path / "missing.py")})
    assert response.status_code == 404


def test_unloadable_expression_is_not_found(
    client: TestClient, release_builder: ReleaseBuilder
) -> None:
    response = client.post(
        "/eval", json={"expression": str(release_builder.write("value = 1\n"))}
    )
    assert response.status_code == 404
    assert "does not define" in response.json()["detail"]


def test_fatal_errors_are_bad_requests() -> None:
    class FailingOrchestrator:
        def run_eval(self, expression, **kwargs):
            raise RootRegistrationError("cannot create root")

    app = create_app(lambda: FailingOrchestrator())  # type: ignore[arg-type, return-value]
    response = TestClient(app).post("/eval", json={"expression": "x.py"})
    assert response.status_code == 400
    assert response.json() == {"detail": "cannot create root"}
