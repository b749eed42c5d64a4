"""Build the script sent to bicep console for a test case."""

import logging
from pathlib import Path

from bicep_unit.test_runner.errors import StructuralError
from bicep_unit.test_runner.models.test_case import InlineInput, LibraryCall, TestCase

logger = logging.getLogger(__name__)


def resolve_input(case: TestCase, project_root: Path) -> str:
    """Resolve the script to evaluate for a test case.

    Args:
        case: Test case to resolve
        project_root: Root directory that bicepFile paths are relative to

    Returns:
        The inline expression, or the library file contents followed by the
        function call on its own line

    Raises:
        StructuralError: If the case has no input or the library file is missing

    """
    if isinstance(case.input, LibraryCall):
        library_file = project_root / case.input.library_path
        try:
            contents = library_file.read_text(encoding="utf-8")
        except OSError as e:
            logger.debug(f"Cannot read {library_file}: {e}")
            raise StructuralError(
                f"library file not found: {case.input.library_path}"
            ) from e
        except UnicodeDecodeError as e:
            raise StructuralError(
                f"library file is not valid UTF-8: {case.input.library_path}"
            ) from e
        return f"{contents}\n{case.input.call}"

    if isinstance(case.input, InlineInput):
        return case.input.expression

    raise StructuralError("test must have either inline input or library file + call")
