"""Test runner coordinating parsing, evaluation and assertion checking."""

import asyncio
import logging
import os
import time
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

from bicep_unit.test_runner import assertions
from bicep_unit.test_runner.errors import EvaluationError, StructuralError
from bicep_unit.test_runner.evaluator import EvaluatorClient
from bicep_unit.test_runner.input_resolver import resolve_input
from bicep_unit.test_runner.models.test_case import TestCase
from bicep_unit.test_runner.models.test_result import (
    AssertionMismatch,
    EvaluationFailure,
    SpecFileOutcome,
    StructuralFailure,
    TestResult,
)
from bicep_unit.test_runner.normalizer import normalize
from bicep_unit.test_runner.test_loader import label_for, load_test_spec

logger = logging.getLogger(__name__)


class RunMode(str, Enum):
    """How spec files are scheduled."""

    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"


class TestRunner:
    """Runs the cases of a set of spec files against an evaluator."""

    __test__ = False

    def __init__(self, evaluator: EvaluatorClient, project_root: Path) -> None:
        """Initialize runner with an evaluator and the bicepFile root."""
        self.evaluator = evaluator
        self.project_root = project_root

    async def run(
        self,
        spec_files: Sequence[Path],
        mode: RunMode = RunMode.SEQUENTIAL,
        max_workers: int | None = None,
    ) -> list[TestResult]:
        """Run every case of every spec file and return the flat result list."""
        outcomes = await self.run_files(spec_files, mode, max_workers)
        return [result for outcome in outcomes for result in outcome.results]

    async def run_files(
        self,
        spec_files: Sequence[Path],
        mode: RunMode = RunMode.SEQUENTIAL,
        max_workers: int | None = None,
    ) -> list[SpecFileOutcome]:
        """Run spec files and return one outcome per file in input order.

        Args:
            spec_files: Spec file paths in discovery order
            mode: Run files one after another or concurrently
            max_workers: Concurrent file limit (default: CPU count)

        Returns:
            Per-file outcomes, ordered like spec_files in both modes

        """
        if mode is RunMode.SEQUENTIAL:
            logger.info(f"Running {len(spec_files)} test files sequentially")
            return [await self._run_file(path) for path in spec_files]

        workers = max_workers or os.cpu_count() or 1
        logger.info(f"Running {len(spec_files)} test files with {workers} workers")
        semaphore = asyncio.Semaphore(workers)

        async def bounded(path: Path) -> SpecFileOutcome:
            async with semaphore:
                return await self._run_file(path)

        outcomes = await asyncio.gather(*(bounded(path) for path in spec_files))
        return list(outcomes)

    async def _run_file(self, path: Path) -> SpecFileOutcome:
        """Run all cases of one spec file in order."""
        logger.info(f"Running test file: {path}")
        try:
            spec = load_test_spec(path)
        except StructuralError as e:
            label = label_for(path)
            logger.error(f"Invalid test file {path}: {e}")
            return SpecFileOutcome(
                label=label,
                path=str(path),
                results=[
                    TestResult(
                        name=label,
                        file_label=label,
                        index=1,
                        status="failed",
                        failure=StructuralFailure(message=str(e)),
                    )
                ],
            )

        results = [await self._run_case(case, spec.label) for case in spec.cases]
        return SpecFileOutcome(
            label=spec.label,
            path=str(path),
            description=spec.description,
            warning=spec.warning,
            results=results,
        )

    async def _run_case(self, case: TestCase, file_label: str) -> TestResult:
        """Run a single case, converting every test error into a result."""
        start = time.monotonic()
        test_id = f"{file_label}[{case.index}] {case.name}"

        def failed(
            failure: StructuralFailure | EvaluationFailure | AssertionMismatch,
            script: str | None = None,
            actual: str | None = None,
        ) -> TestResult:
            logger.info(f"Test result: {test_id} = failed ({failure.type})")
            return TestResult(
                name=case.name,
                file_label=file_label,
                index=case.index,
                status="failed",
                failure=failure,
                duration=time.monotonic() - start,
                input=script,
                actual=actual,
            )

        if case.structural_error is not None:
            return failed(StructuralFailure(message=case.structural_error))

        try:
            script = resolve_input(case, self.project_root)
        except StructuralError as e:
            return failed(StructuralFailure(message=str(e)))

        if case.assertion is None:  # pragma: no cover
            return failed(StructuralFailure(message="test has no assertion"), script)

        logger.debug(f"Evaluating {test_id}: {script}")
        try:
            raw = await self.evaluator.invoke(script)
        except EvaluationError as e:
            return failed(EvaluationFailure(message=str(e)), script)

        actual = normalize(raw)
        try:
            passed = assertions.evaluate(case.assertion, actual)
        except EvaluationError as e:
            return failed(EvaluationFailure(message=str(e)), script, actual)

        if not passed:
            return failed(
                AssertionMismatch(
                    assertion_kind=case.assertion.kind,
                    expected=assertions.expected_operand(case.assertion),
                    actual=actual,
                    message=assertions.explain(case.assertion, actual),
                ),
                script,
                actual,
            )

        logger.info(f"Test result: {test_id} = passed")
        return TestResult(
            name=case.name,
            file_label=file_label,
            index=case.index,
            status="passed",
            duration=time.monotonic() - start,
            input=script,
            actual=actual,
        )
