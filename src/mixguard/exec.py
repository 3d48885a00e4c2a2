"""Subprocess runner used by quality checks."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ExecResult:
    """Result envelope for subprocess execution."""

    argv: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        """Combined stdout/stderr, in that order."""
        return "".join(part for part in (self.stdout, self.stderr) if part)


def run_command(argv: list[str], *, cwd: Path) -> ExecResult:
    """Run command to completion and return structured result.

    Raises OSError when the executable cannot be launched.
    """
    completed = subprocess.run(argv, cwd=cwd, capture_output=True, text=True, check=False)
    return ExecResult(
        argv=tuple(argv),
        cwd=cwd.resolve(),
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )
