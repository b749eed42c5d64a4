"""Data models for test cases, configuration, and results."""

from bicep_unit.test_runner.models.runner_config import RunnerConfig
from bicep_unit.test_runner.models.test_case import (
    Assertion,
    AssertionKind,
    InlineInput,
    LibraryCall,
    TestCase,
    TestSpecFile,
)
from bicep_unit.test_runner.models.test_result import (
    AssertionMismatch,
    EvaluationFailure,
    FailureReason,
    RunSummary,
    SpecFileOutcome,
    StructuralFailure,
    TestResult,
)

__all__ = [
    "Assertion",
    "AssertionKind",
    "AssertionMismatch",
    "EvaluationFailure",
    "FailureReason",
    "InlineInput",
    "LibraryCall",
    "RunSummary",
    "RunnerConfig",
    "SpecFileOutcome",
    "StructuralFailure",
    "TestCase",
    "TestResult",
    "TestSpecFile",
]
