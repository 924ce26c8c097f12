"""CLI behaviour tests."""

from __future__ import annotations

import io
import json
import os
from pathlib import Path

import pytest

from evaljobs.cli import _build_parser, main
from tests._fixtures.release_builder import ReleaseBuilder, drv_path, out_path

RELEASE = """
def jobs(system="x86_64-linux", officialRelease=False):
    return {
        "hello": lazy(lambda: derivation(
            "hello-2.12",
            system=system,
            drv_path=%(hello_drv)r,
            outputs={"out": %(hello_out)r},
            meta={"description": "A greeter", "license": [{"shortName": "gpl3Plus"}]},
        )),
        "release": lazy(lambda: None if officialRelease else throw("not an official release")),
        "broken": lazy(lambda: throw("unsupported platform")),
    }
"""


def _release(builder: ReleaseBuilder) -> Path:
    return builder.write(
        RELEASE % {"hello_drv": drv_path("hello-2.12"), "hello_out": out_path("hello-2.12")}
    )


def test_parser_collects_auto_arguments() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["release.py", "--arg", "officialRelease", "true", "--argstr", "system", "aarch64-linux"]
    )
    assert args.expression == "release.py"
    assert args.arg == [["officialRelease", "true"]]
    assert args.argstr == [["system", "aarch64-linux"]]
    assert args.dry_run is None


def test_parser_accepts_roots_dir_and_includes() -> None:
    args = _build_parser().parse_args(
        ["--gc-roots-dir", "/roots", "-I", "lib", "--include", "more", "--dry-run", "r.py"]
    )
    assert args.gc_roots_dir == Path("/roots")
    assert args.include == [Path("lib"), Path("more")]
    assert args.dry_run is True


def test_missing_expression_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2


def test_main_prints_json_document(release_builder: ReleaseBuilder, tmp_path: Path) -> None:
    release = _release(release_builder)
    roots = tmp_path / "roots"
    out = io.StringIO()

    status = main([str(release), "--gc-roots-dir", str(roots)], stdout=out)

    assert status == 0
    document = json.loads(out.getvalue())
    assert list(document) == ["broken", "hello", "release"]
    assert document["hello"]["system"] == "x86_64-linux"
    assert document["hello"]["license"] == "gpl3Plus"
    assert document["broken"] == {"error": "unsupported platform"}
    assert document["release"] == {"error": "not an official release"}
    assert os.readlink(roots / os.path.basename(drv_path("hello-2.12"))) == drv_path("hello-2.12")


def test_main_passes_auto_arguments(release_builder: ReleaseBuilder) -> None:
    release = _release(release_builder)
    out = io.StringIO()

    status = main(
        [
            str(release),
            "--arg",
            "officialRelease",
            "true",
            "--argstr",
            "system",
            "aarch64-linux",
            "--dry-run",
        ],
        stdout=out,
    )

    assert status == 0
    document = json.loads(out.getvalue())
    assert "release" not in document
    assert document["hello"]["system"] == "aarch64-linux"


def test_main_nested_output(release_builder: ReleaseBuilder) -> None:
    release = release_builder.write(
        """
        jobs = {"a": {"b": lazy(lambda: derivation(
            "b", system="x86_64-linux", drv_path="/nix/store/b.drv", outputs={"out": "/nix/store/b"}
        ))}}
        """
    )
    out = io.StringIO()

    assert main([str(release), "--nested"], stdout=out) == 0
    assert json.loads(out.getvalue())["a"]["b"]["nixName"] == "b"


def test_main_reads_config_next_to_expression(release_builder: ReleaseBuilder) -> None:
    release = _release(release_builder)
    (release_builder.path() / "hydra-eval-jobs.yml").write_text(
        "dry_run: true\nauto_args:\n  system: i686-linux\n", encoding="utf-8"
    )
    out = io.StringIO()

    assert main([str(release)], stdout=out) == 0
    assert json.loads(out.getvalue())["hello"]["system"] == "i686-linux"


def test_main_fatal_errors_return_non_zero(release_builder: ReleaseBuilder, tmp_path: Path) -> None:
    out = io.StringIO()
    assert main([str(tmp_path / "missing.py")], stdout=out) == 1

    broken = release_builder.write("jobs = undefined_name\n", name="broken.py")
    assert main([str(broken)], stdout=out) == 1
    assert out.getvalue() == ""


def test_main_invalid_config_returns_non_zero(release_builder: ReleaseBuilder) -> None:
    release = _release(release_builder)
    config = release_builder.path() / "custom.yml"
    config.write_text("- not a mapping\n", encoding="utf-8")
    out = io.StringIO()

    assert main([str(release), "--config", str(config)], stdout=out) == 1
    assert out.getvalue() == ""
