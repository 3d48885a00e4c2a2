"""Quality checks: one external mix command per check.

A check never raises. Whatever the external tool does (non-zero exit,
missing executable) ends up in a ``CheckResult``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from mixguard.exec import ExecResult, run_command

logger = logging.getLogger(__name__)

CheckName = Literal["compile", "format", "lint", "test"]
CheckStatus = Literal["pass", "fail", "not_applicable"]

ALL_CHECKS: tuple[CheckName, ...] = ("compile", "format", "lint", "test")
SAFE_CHECKS: tuple[CheckName, ...] = ("compile", "format")

MIX_MISSING_HINT = "Ensure Elixir is installed and `mix` is on PATH"


@dataclass(frozen=True)
class CheckResult:
    """Individual check result."""

    name: CheckName
    status: CheckStatus
    output: str = ""
    remediation_hint: str = ""
    argv: tuple[str, ...] = ()
    returncode: int | None = None


@dataclass(frozen=True)
class CheckDefinition:
    """How to run and explain one check."""

    name: CheckName
    label: str
    command: tuple[str, ...]
    pass_message: str
    fail_message: str
    remediation: str
    per_file: bool = False
    optional: bool = False
    probe: tuple[str, ...] | None = None
    unavailable_hint: str = ""

    def argv(self, file_path: Path | None = None) -> list[str]:
        argv = list(self.command)
        if self.per_file and file_path is not None:
            argv.append(str(file_path))
        return argv

    def hint(self, file_path: Path | None = None) -> str:
        if self.per_file and file_path is not None:
            return self.remediation.replace("{target}", f" {file_path}")
        return self.remediation.replace("{target}", "")


CHECKS: dict[CheckName, CheckDefinition] = {
    "compile": CheckDefinition(
        name="compile",
        label="Compiling with --warnings-as-errors",
        command=("mix", "compile", "--warnings-as-errors"),
        pass_message="Compilation passed",
        fail_message="Compilation failed - fix warnings/errors before committing",
        remediation="Fix the reported warnings/errors, then re-run: mix compile --warnings-as-errors",
    ),
    "format": CheckDefinition(
        name="format",
        label="Checking formatting",
        command=("mix", "format", "--check-formatted"),
        pass_message="Formatting correct",
        fail_message="Files need formatting",
        remediation="Run the formatter to fix: mix format{target}",
        per_file=True,
    ),
    "lint": CheckDefinition(
        name="lint",
        label="Running Credo (strict)",
        command=("mix", "credo", "--strict"),
        pass_message="Credo passed",
        fail_message="Credo found issues - fix before committing",
        remediation="Run: mix credo --strict{target} and fix every reported issue",
        per_file=True,
        optional=True,
        probe=("mix", "help", "credo"),
        unavailable_hint='Credo not installed - add {:credo, "~> 1.7", only: [:dev, :test], runtime: false} to mix.exs',
    ),
    "test": CheckDefinition(
        name="test",
        label="Running tests",
        command=("mix", "test"),
        pass_message="All tests passed",
        fail_message="Tests failed - fix before committing",
        remediation="Run: mix test, fix the failing tests, then commit again",
    ),
}


def _launch(argv: list[str], cwd: Path) -> ExecResult | OSError:
    try:
        return run_command(argv, cwd=cwd)
    except OSError as e:
        return e


def is_available(definition: CheckDefinition, project_root: Path) -> bool:
    """Probe whether an optional tool is installed in the project."""
    if definition.probe is None:
        return True
    outcome = _launch(list(definition.probe), project_root)
    return isinstance(outcome, ExecResult) and outcome.returncode == 0


def run_check(
    definition: CheckDefinition,
    project_root: Path,
    file_path: Path | None = None,
) -> CheckResult:
    """Run one check and map its exit code to a CheckResult."""
    if definition.optional and not is_available(definition, project_root):
        logger.debug("%s unavailable in %s", definition.name, project_root)
        return CheckResult(
            name=definition.name,
            status="not_applicable",
            output=definition.unavailable_hint,
            remediation_hint=definition.unavailable_hint,
        )

    argv = definition.argv(file_path)
    outcome = _launch(argv, project_root)
    if isinstance(outcome, OSError):
        return CheckResult(
            name=definition.name,
            status="fail",
            output=f"Failed to launch {' '.join(argv)}: {outcome}",
            remediation_hint=MIX_MISSING_HINT,
            argv=tuple(argv),
        )

    if outcome.returncode == 0:
        return CheckResult(
            name=definition.name,
            status="pass",
            output=outcome.output,
            argv=outcome.argv,
            returncode=0,
        )

    return CheckResult(
        name=definition.name,
        status="fail",
        output=outcome.output,
        remediation_hint=definition.hint(file_path),
        argv=outcome.argv,
        returncode=outcome.returncode,
    )
