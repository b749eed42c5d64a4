"""Tests for test input resolution."""

from pathlib import Path

import pytest

from bicep_unit.test_runner.errors import StructuralError
from bicep_unit.test_runner.input_resolver import resolve_input
from bicep_unit.test_runner.models.test_case import (
    Assertion,
    AssertionKind,
    InlineInput,
    LibraryCall,
    TestCase,
)

ASSERTION = Assertion(kind=AssertionKind.EQUALS, expected="3")


def test_resolve_inline_expression(tmp_path: Path) -> None:
    """resolve_input returns inline expressions verbatim."""
    case = TestCase(
        name="len",
        index=1,
        input=InlineInput(expression="length([1, 2, 3])"),
        assertion=ASSERTION,
    )

    assert resolve_input(case, tmp_path) == "length([1, 2, 3])"


def test_resolve_library_call(tmp_path: Path) -> None:
    """resolve_input prepends the library file to the function call."""
    lib_dir = tmp_path / "lib"
    lib_dir.mkdir()
    (lib_dir / "math.bicep").write_text("func double(x int) int => x * 2\n")
    case = TestCase(
        name="double",
        index=1,
        input=LibraryCall(library_path="lib/math.bicep", call="double(2)"),
        assertion=ASSERTION,
    )

    script = resolve_input(case, tmp_path)

    assert script == "func double(x int) int => x * 2\n\ndouble(2)"


def test_resolve_library_relative_to_project_root(tmp_path: Path) -> None:
    """resolve_input does not resolve library paths against the cwd."""
    (tmp_path / "funcs.bicep").write_text("func one() int => 1")
    case = TestCase(
        name="one",
        index=1,
        input=LibraryCall(library_path="funcs.bicep", call="one()"),
        assertion=ASSERTION,
    )

    with pytest.raises(StructuralError):
        resolve_input(case, tmp_path / "elsewhere")


def test_resolve_missing_library_file(tmp_path: Path) -> None:
    """resolve_input raises StructuralError for a missing library file."""
    case = TestCase(
        name="missing",
        index=1,
        input=LibraryCall(library_path="missing.bicep", call="f()"),
        assertion=ASSERTION,
    )

    with pytest.raises(StructuralError, match="library file not found: missing.bicep"):
        resolve_input(case, tmp_path)


def test_resolve_without_input(tmp_path: Path) -> None:
    """resolve_input raises StructuralError when no input is defined."""
    case = TestCase(name="empty", index=1, assertion=ASSERTION)

    with pytest.raises(StructuralError, match="either inline input or library file"):
        resolve_input(case, tmp_path)


def test_resolve_library_file_invalid_utf8(tmp_path: Path) -> None:
    """resolve_input raises StructuralError naming a library file that is not UTF-8."""
    (tmp_path / "lib.bicep").write_bytes(b"\xff\xfe func")
    case = TestCase(
        name="binary",
        index=1,
        input=LibraryCall(library_path="lib.bicep", call="f()"),
        assertion=ASSERTION,
    )

    with pytest.raises(StructuralError, match="not valid UTF-8: lib.bicep"):
        resolve_input(case, tmp_path)
