"""Aggregate results and render run reports."""

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import typer

from bicep_unit.test_runner.models.test_result import (
    AssertionMismatch,
    RunSummary,
    SpecFileOutcome,
    TestResult,
)

RULE = "=" * 48


def aggregate(results: Iterable[TestResult]) -> RunSummary:
    """Reduce per-case results into run totals."""
    total = 0
    passed = 0
    for result in results:
        total += 1
        if result.passed:
            passed += 1
    return RunSummary(total=total, passed=passed, failed=total - passed)


def render_header(test_dir: Path) -> None:
    """Print the report banner."""
    typer.echo(RULE)
    typer.echo("Bicep Function Unit Test Runner")
    typer.echo(RULE)
    typer.echo(f"Test directory: {test_dir}")
    typer.echo("")


def render_text_report(
    outcomes: Sequence[SpecFileOutcome],
    summary: RunSummary,
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """Print per-case results followed by the summary.

    Args:
        outcomes: Per-file outcomes in discovery order
        summary: Aggregated totals
        verbose: Also print descriptions, inputs and actual values
        quiet: Only print failures and the summary

    """
    for outcome in outcomes:
        _render_file(outcome, verbose, quiet)
    render_summary(summary)


def render_summary(summary: RunSummary) -> None:
    """Print the summary block."""
    typer.echo("")
    typer.echo(RULE)
    typer.echo("Test Summary")
    typer.echo(RULE)
    typer.echo(f"Total tests:  {summary.total}")
    typer.echo(f"Passed:       {typer.style(str(summary.passed), fg='green')}")
    typer.echo(f"Failed:       {typer.style(str(summary.failed), fg='red')}")
    typer.echo(RULE)


def _render_file(outcome: SpecFileOutcome, verbose: bool, quiet: bool) -> None:
    if not quiet:
        typer.echo("")
        typer.echo(typer.style(f"Running test: {outcome.label}", fg="yellow"))
        if verbose and outcome.description:
            typer.echo(f"  Description: {outcome.description}")

    if outcome.warning:
        typer.echo(typer.style(f"  ✗ WARNING: {outcome.warning}", fg="yellow"))

    for result in outcome.results:
        if quiet and result.passed:
            continue
        _render_result(result, verbose, quiet)


def _render_result(result: TestResult, verbose: bool, quiet: bool) -> None:
    prefix = f"{result.file_label} " if quiet else ""
    marker = typer.style(f"[{result.index}]", fg="yellow")
    typer.echo(f"  {marker} {prefix}{result.name}")

    if verbose and result.input is not None:
        typer.echo(_indent(f"Input: {result.input}"))
    if verbose and result.actual is not None:
        typer.echo(_indent(f"Actual: {result.actual}"))

    if result.passed:
        typer.echo(f"    {typer.style('✓ PASSED', fg='green')}")
        return

    typer.echo(f"    {typer.style('✗ FAILED', fg='red')}")
    typer.echo(_indent(describe_failure(result)))


def describe_failure(result: TestResult) -> str:
    """Return the human-readable reason a result failed."""
    failure = result.failure
    if failure is None:
        return ""
    if isinstance(failure, AssertionMismatch):
        return failure.message or (
            f"Expected: {failure.expected}\nActual:   {failure.actual}"
        )
    return f"Error: {failure.message}"


def build_json_report(
    outcomes: Sequence[SpecFileOutcome], summary: RunSummary
) -> dict[str, Any]:
    """Build a JSON-serializable report."""
    return {
        "total": summary.total,
        "passed": summary.passed,
        "failed": summary.failed,
        "files": [
            {
                "label": outcome.label,
                "path": outcome.path,
                "description": outcome.description,
                "warning": outcome.warning,
            }
            for outcome in outcomes
        ],
        "results": [
            {
                "file": r.file_label,
                "index": r.index,
                "name": r.name,
                "status": r.status,
                "duration": r.duration,
                "failure": r.failure.model_dump(mode="json") if r.failure else None,
            }
            for outcome in outcomes
            for r in outcome.results
        ],
    }


def _indent(text: str, spaces: int = 4) -> str:
    pad = " " * spaces
    return "\n".join(f"{pad}{line}" for line in text.split("\n"))
