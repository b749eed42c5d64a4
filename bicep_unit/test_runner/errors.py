"""Exceptions raised while loading, resolving and evaluating Bicep tests."""


class BicepTestError(Exception):
    """Base class for test runner errors."""


class StructuralError(BicepTestError, ValueError):
    """A test specification is malformed or incomplete."""


class EvaluationError(BicepTestError, RuntimeError):
    """A test could not be evaluated (evaluator failure, bad operand or pattern)."""


class EvaluatorNotFoundError(BicepTestError, FileNotFoundError):
    """The bicep executable could not be located."""
