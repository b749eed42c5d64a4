"""End-to-end tests running the CLI against a fake bicep executable."""

import json
import stat
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bicep_unit.test_runner.cli import app

pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="fake bicep executable is a POSIX script"
)

FAKE_BICEP = """#!{python}
import sys

RESULTS = {{
    "length([1,2,3])": "3",
    "concat('a','b')": "'ab'",
    "double(21)": "42",
    "[]": "[]",
}}

assert sys.argv[1:] == ["console"], sys.argv
script = sys.stdin.read().strip().splitlines()
print("WARNING: The 'console' CLI command is an experimental feature.")
print("Experimental features should be used for testing purposes only.\\r")
print()
print(RESULTS.get(script[-1], "unknown expression"))
"""


@pytest.fixture
def fake_bicep(tmp_path: Path) -> Path:
    """Create an executable that mimics bicep console."""
    executable = tmp_path / "bin" / "bicep"
    executable.parent.mkdir()
    executable.write_text(FAKE_BICEP.format(python=sys.executable))
    executable.chmod(executable.stat().st_mode | stat.S_IXUSR)
    return executable


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a project with legacy, modern and library tests."""
    root = tmp_path / "project"
    tests = root / "tests"
    (tests / "nested").mkdir(parents=True)
    (root / "lib").mkdir()
    (root / "lib" / "math.bicep").write_text("func double(x int) int => x * 2\n")

    (tests / "concat.bicep-test.json").write_text(
        json.dumps({"input": "concat('a','b')", "expected": "'ab'"})
    )
    (tests / "nested" / "arrays.bicep-test.json").write_text(
        json.dumps(
            {
                "description": "array functions",
                "tests": [
                    {"name": "len3", "input": "length([1,2,3])", "shouldBe": "3"},
                    {"name": "big", "input": "length([1,2,3])", "shouldBeLessThan": 10},
                    {"name": "empty", "input": "[]", "shouldBeEmpty": True},
                    {
                        "name": "double",
                        "bicepFile": "lib/math.bicep",
                        "functionCall": "double(21)",
                        "shouldMatch": "^4\\d$",
                    },
                ],
            }
        )
    )
    (tests / "empty.bicep-test.json").write_text(json.dumps({"tests": []}))
    return root


@pytest.mark.parametrize("extra_args", [[], ["--parallel", "--max-workers", "2"]])
def test_cli_all_passing(
    fake_bicep: Path, project: Path, extra_args: list[str]
) -> None:
    """All tests pass against the fake evaluator in both run modes."""
    result = CliRunner().invoke(
        app,
        [
            "run",
            "--test-dir",
            str(project / "tests"),
            "--project-root",
            str(project),
            "--bicep-path",
            str(fake_bicep),
            "--json",
            *extra_args,
        ],
    )

    assert result.exit_code == 0, result.output
    report = json.loads(result.stdout)
    assert report["total"] == 5
    assert report["passed"] == 5
    assert report["failed"] == 0
    assert [f["label"] for f in report["files"]] == ["concat", "empty", "arrays"]


def test_cli_reports_failures(fake_bicep: Path, project: Path) -> None:
    """Failing and broken tests are reported and the run exits with 1."""
    (project / "tests" / "zz-broken.bicep-test.json").write_text(
        json.dumps(
            {
                "tests": [
                    {"name": "wrong", "input": "length([1,2,3])", "shouldBe": "4"},
                    {"name": "regex", "input": "[]", "shouldMatch": "[invalid("},
                    {
                        "name": "missing lib",
                        "bicepFile": "missing.bicep",
                        "functionCall": "f()",
                        "shouldBe": "1",
                    },
                ]
            }
        )
    )

    result = CliRunner().invoke(
        app,
        [
            "run",
            "-d",
            str(project / "tests"),
            "--project-root",
            str(project),
            "--bicep-path",
            str(fake_bicep),
        ],
    )

    assert result.exit_code == 1
    assert "Expected: 4" in result.stdout
    assert "Actual:   3" in result.stdout
    assert "invalid regular expression" in result.stdout
    assert "library file not found: missing.bicep" in result.stdout
    assert "Total tests:  8" in result.stdout
    assert "No tests defined in file" in result.stdout
