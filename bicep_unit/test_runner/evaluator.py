"""Evaluate Bicep scripts by piping them into bicep console."""

import asyncio
import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

from bicep_unit.test_runner.errors import EvaluationError, EvaluatorNotFoundError

logger = logging.getLogger(__name__)


class EvaluatorClient(ABC):
    """Abstract base for Bicep expression evaluators."""

    @abstractmethod
    async def invoke(self, script: str) -> str:
        """Evaluate a script and return the raw evaluator output.

        Args:
            script: Bicep script (definitions followed by an expression)

        Returns:
            Unnormalized output text, including any diagnostics

        Raises:
            EvaluationError: If the evaluator cannot be run

        """


def resolve_evaluator_path(bicep_path: str | None = None) -> str:
    """Locate the bicep executable.

    Args:
        bicep_path: Explicit executable path or name, or None to search PATH

    Returns:
        Path of the executable

    Raises:
        EvaluatorNotFoundError: If the executable cannot be found

    """
    candidate = bicep_path or "bicep"
    if Path(candidate).is_file():
        return candidate

    found = shutil.which(candidate)
    if found is None:
        raise EvaluatorNotFoundError(
            f"bicep CLI is not installed or not in PATH: {candidate}"
        )
    return found


class BicepConsoleEvaluator(EvaluatorClient):
    """Runs one ``bicep console`` subprocess per script."""

    def __init__(
        self,
        command: list[str],
        timeout: float | None = None,
    ) -> None:
        """Initialize evaluator with the command line to execute.

        Args:
            command: Executable and arguments, e.g. ["bicep", "console"]
            timeout: Seconds to wait for each evaluation, or None to wait forever

        """
        self.command = command
        self.timeout = timeout

    async def invoke(self, script: str) -> str:
        """Pipe the script into a fresh evaluator process.

        A non-zero exit status is not an error: bicep reports expression
        errors as text, which the assertion then compares.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise EvaluationError(f"Failed to start evaluator: {e}") from e

        try:
            stdout, _ = await asyncio.wait_for(
                process.communicate(f"{script}\n".encode()), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise EvaluationError(
                f"evaluator timed out after {self.timeout}s"
            ) from None
        except OSError as e:
            raise EvaluationError(f"Failed to communicate with evaluator: {e}") from e

        if process.returncode != 0:
            logger.debug(f"Evaluator exited with code {process.returncode}")

        return stdout.decode(errors="replace")
