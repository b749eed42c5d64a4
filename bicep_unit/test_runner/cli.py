"""CLI entry point for the Bicep function test runner."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import typer

from bicep_unit.test_runner.errors import EvaluationError, EvaluatorNotFoundError
from bicep_unit.test_runner.evaluator import (
    BicepConsoleEvaluator,
    resolve_evaluator_path,
)
from bicep_unit.test_runner.models.runner_config import RunnerConfig
from bicep_unit.test_runner.normalizer import normalize
from bicep_unit.test_runner.report import (
    aggregate,
    build_json_report,
    render_header,
    render_text_report,
)
from bicep_unit.test_runner.runner import RunMode, TestRunner
from bicep_unit.test_runner.test_loader import TEST_FILE_SUFFIX, discover_test_files

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
    force=True,
)
logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_TESTS_FAILED = 1
EXIT_ENVIRONMENT_ERROR = 2
EXIT_NO_TESTS = 3

app = typer.Typer(
    help="Run Bicep function unit tests using bicep console.",
    no_args_is_help=True,
)


@app.command()
def run(  # noqa: PLR0913
    test_dir: Path = typer.Option(  # noqa: B008
        Path("./tests"),  # noqa: B008
        "--test-dir",
        "-d",
        envvar="TEST_DIR",
        help="Directory containing test files",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", envvar="VERBOSE", help="Enable verbose output"
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        envvar="QUIET_MODE",
        help="Quiet mode - only show failures and summary",
    ),
    parallel: bool = typer.Option(
        False, "--parallel", "-p", help="Run test files concurrently"
    ),
    max_workers: int | None = typer.Option(
        None,
        "--max-workers",
        "-j",
        min=1,
        help="Maximum test files run at once (default: CPU count)",
    ),
    project_root: Path | None = typer.Option(  # noqa: B008
        None, help="Root directory for bicepFile paths (default: current directory)"
    ),
    bicep_path: str | None = typer.Option(
        None, envvar="BICEP_PATH", help="Path to the bicep executable"
    ),
    timeout: float | None = typer.Option(
        None, min=0.001, help="Seconds to wait for each evaluation"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print a JSON report instead of text"
    ),
) -> None:
    """Run all *.bicep-test.json files in a directory."""
    config = RunnerConfig(
        test_dir=test_dir,
        project_root=project_root or Path.cwd(),
        bicep_path=bicep_path,
        verbose=verbose,
        quiet=quiet,
        parallel=parallel,
        max_workers=max_workers,
        timeout=timeout,
        json_output=json_output,
    )
    raise typer.Exit(code=run_tests(config))


def run_tests(config: RunnerConfig) -> int:
    """Run the configured tests, print the report and return the exit code."""
    if config.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        executable = resolve_evaluator_path(config.bicep_path)
    except EvaluatorNotFoundError as e:
        logger.error(f"Evaluator lookup failed: {e}")
        typer.echo(typer.style(f"Error: {e}", fg="red"), err=True)
        return EXIT_ENVIRONMENT_ERROR

    if not config.test_dir.is_dir():
        message = f"Test directory '{config.test_dir}' does not exist"
        logger.error(message)
        typer.echo(typer.style(f"Error: {message}", fg="red"), err=True)
        return EXIT_ENVIRONMENT_ERROR

    if not config.json_output:
        render_header(config.test_dir)

    spec_files = discover_test_files(config.test_dir)
    if not spec_files:
        typer.echo(
            typer.style(f"No test files found in {config.test_dir}", fg="yellow"),
            err=config.json_output,
        )
        typer.echo(
            f"Test files should be named *{TEST_FILE_SUFFIX}", err=config.json_output
        )
        return EXIT_NO_TESTS

    logger.info(f"Discovered {len(spec_files)} test files in {config.test_dir}")
    evaluator = BicepConsoleEvaluator([executable, "console"], timeout=config.timeout)
    runner = TestRunner(evaluator, config.project_root)
    mode = RunMode.CONCURRENT if config.parallel else RunMode.SEQUENTIAL

    outcomes = asyncio.run(runner.run_files(spec_files, mode, config.max_workers))
    summary = aggregate(r for outcome in outcomes for r in outcome.results)

    if config.json_output:
        typer.echo(json.dumps(build_json_report(outcomes, summary), indent=2))
    else:
        render_text_report(outcomes, summary, config.verbose, config.quiet)

    if not summary.success:
        logger.error(f"Tests failed: {summary.failed}/{summary.total}")
        return EXIT_TESTS_FAILED
    return EXIT_SUCCESS


@app.command("expected-output")
def expected_output(
    expression: str = typer.Argument(..., help="Bicep expression to evaluate"),
    bicep_path: str | None = typer.Option(
        None, envvar="BICEP_PATH", help="Path to the bicep executable"
    ),
) -> None:
    """Print the normalized bicep console output for an expression.

    The output can be pasted into a test file as the expected value.
    """
    try:
        executable = resolve_evaluator_path(bicep_path)
        evaluator = BicepConsoleEvaluator([executable, "console"])
        raw = asyncio.run(evaluator.invoke(expression))
    except (EvaluatorNotFoundError, EvaluationError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_ENVIRONMENT_ERROR)

    typer.echo("Input expression:")
    typer.echo(expression)
    typer.echo("")
    typer.echo("Expected output (copy this for your test):")
    typer.echo(normalize(raw))


if __name__ == "__main__":  # pragma: no cover
    app()
