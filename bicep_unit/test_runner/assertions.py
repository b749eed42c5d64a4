"""Evaluate test assertions against normalized bicep output."""

import math
import re
from collections.abc import Callable

from bicep_unit.test_runner.errors import EvaluationError
from bicep_unit.test_runner.models.test_case import Assertion, AssertionKind
from bicep_unit.test_runner.normalizer import normalize

# Literal renderings of empty values by bicep console.
EMPTY_LITERALS = frozenset({"''", '""', "[]", "{}"})

_Check = Callable[[str, str], bool]

# Plain decimal literal, optionally signed, with an optional exponent.
_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _to_float(value: str, role: str, kind: AssertionKind) -> float:
    number = float(value) if _NUMBER_PATTERN.fullmatch(value.strip()) else math.nan
    if not math.isfinite(number):
        raise EvaluationError(
            f"{kind.value} requires numeric values, {role} value is not a number: "
            f"'{value}'"
        )
    return number


def _ordering(kind: AssertionKind, compare: Callable[[float, float], bool]) -> _Check:
    def check(actual: str, expected: str) -> bool:
        return compare(
            _to_float(actual, "actual", kind), _to_float(expected, "expected", kind)
        )

    return check


def _matches(actual: str, pattern: str) -> bool:
    try:
        return re.search(pattern, actual) is not None
    except re.error as e:
        raise EvaluationError(f"invalid regular expression '{pattern}': {e}") from e


def _is_empty(actual: str, _expected: str) -> bool:
    return not actual.strip() or actual in EMPTY_LITERALS


_CHECKS: dict[AssertionKind, _Check] = {
    AssertionKind.EQUALS: lambda a, e: a == e,
    AssertionKind.NOT_EQUALS: lambda a, e: a != e,
    AssertionKind.CONTAINS: lambda a, e: e in a,
    AssertionKind.NOT_CONTAINS: lambda a, e: e not in a,
    AssertionKind.STARTS_WITH: lambda a, e: a.startswith(e),
    AssertionKind.ENDS_WITH: lambda a, e: a.endswith(e),
    AssertionKind.MATCHES_REGEX: _matches,
    AssertionKind.GREATER_THAN: _ordering(AssertionKind.GREATER_THAN, lambda a, e: a > e),
    AssertionKind.LESS_THAN: _ordering(AssertionKind.LESS_THAN, lambda a, e: a < e),
    AssertionKind.GREATER_THAN_OR_EQUAL: _ordering(
        AssertionKind.GREATER_THAN_OR_EQUAL, lambda a, e: a >= e
    ),
    AssertionKind.IS_EMPTY: _is_empty,
}

# (expected label, actual label) used in failure explanations.
_EXPLANATIONS: dict[AssertionKind, tuple[str, str]] = {
    AssertionKind.EQUALS: ("Expected", "Actual"),
    AssertionKind.NOT_EQUALS: ("Should NOT be", "But actual was"),
    AssertionKind.CONTAINS: ("Should contain", "Actual"),
    AssertionKind.NOT_CONTAINS: ("Should NOT contain", "Actual"),
    AssertionKind.STARTS_WITH: ("Should start with", "Actual"),
    AssertionKind.ENDS_WITH: ("Should end with", "Actual"),
    AssertionKind.MATCHES_REGEX: ("Should match", "Actual"),
    AssertionKind.GREATER_THAN: ("Should be greater than", "Actual"),
    AssertionKind.LESS_THAN: ("Should be less than", "Actual"),
    AssertionKind.GREATER_THAN_OR_EQUAL: ("Should be greater than or equal to", "Actual"),
}


def expected_operand(assertion: Assertion) -> str | None:
    """Return the normalized expected operand, or None for shouldBeEmpty."""
    if assertion.kind is AssertionKind.IS_EMPTY:
        return None
    return normalize(assertion.expected or "")


def evaluate(assertion: Assertion, actual: str) -> bool:
    """Check an assertion against normalized output.

    Args:
        assertion: Assertion to apply
        actual: Normalized evaluator output

    Returns:
        True if the assertion holds

    Raises:
        EvaluationError: If the pattern is invalid or an ordering operand is
            not numeric

    """
    check = _CHECKS[assertion.kind]
    return check(actual, expected_operand(assertion) or "")


def explain(assertion: Assertion, actual: str) -> str:
    """Describe why an assertion failed."""
    if assertion.kind is AssertionKind.IS_EMPTY:
        return f"Should be empty\nBut actual was: {actual}"

    expected_label, actual_label = _EXPLANATIONS[assertion.kind]
    width = max(len(expected_label), len(actual_label)) + 1
    return (
        f"{expected_label + ':':<{width}} {expected_operand(assertion)}\n"
        f"{actual_label + ':':<{width}} {actual}"
    )
