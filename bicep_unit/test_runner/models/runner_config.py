"""Configuration model for a test run."""

from pathlib import Path

from pydantic import BaseModel, Field


class RunnerConfig(BaseModel):
    """Settings collected from the command line and environment."""

    test_dir: Path = Field(
        default=Path("./tests"), description="Directory searched for test files"
    )
    project_root: Path = Field(
        default_factory=Path.cwd,
        description="Root that bicepFile paths are resolved against",
    )
    bicep_path: str | None = Field(
        default=None, description="Path to the bicep executable (default: PATH)"
    )
    verbose: bool = Field(default=False, description="Show inputs and outputs")
    quiet: bool = Field(default=False, description="Only show failures and summary")
    parallel: bool = Field(default=False, description="Run spec files concurrently")
    max_workers: int | None = Field(
        default=None, ge=1, description="Concurrent file limit (default: CPU count)"
    )
    timeout: float | None = Field(
        default=None, gt=0, description="Per-evaluation timeout in seconds"
    )
    json_output: bool = Field(default=False, description="Print a JSON report")
