"""Gate controller: when each checker runs and whether it blocks.

Entry points:
- ``on_pre_commit_or_push``: full pipeline, blocking
- ``on_file_changed``: compile + format for one file, never blocking
- ``on_command_proposed``: resolve + classify, blocking on ``block``

Outside a mix project every entry point answers ``not_applicable``.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

from mixguard.mode import GateMode
from mixguard.project import detect_project, is_elixir_source
from mixguard.quality.checks import ALL_CHECKS, SAFE_CHECKS
from mixguard.quality.pipeline import NOT_A_PROJECT, GateVerdict, run_pipeline
from mixguard.safety.classifier import check_command
from mixguard.safety.parser import parse_command
from mixguard.safety.resolver import resolve
from mixguard.safety.rules import git_invocation
from mixguard.safety.types import CommandVerdict

logger = logging.getLogger(__name__)

EXIT_PROCEED = 0
EXIT_TOOLING_ERROR = 1
EXIT_BLOCKED = 2

EDIT_VALIDATION_DISABLED = "Per-edit validation disabled (ELIXIR_VALIDATE_ON_EDIT=0)"
NOT_ELIXIR_SOURCE = "Not an Elixir source file; per-edit checks not applicable"


def on_pre_commit_or_push(cwd: Path, mode: GateMode) -> GateVerdict:
    """Run the full quality gate before a commit or push (blocking)."""
    verdict = run_pipeline(mode, cwd, ALL_CHECKS, blocking=True)
    logger.debug("pre-commit gate in %s: %s", cwd, verdict.decision)
    return verdict


def on_file_changed(path: str | Path | None, cwd: Path, mode: GateMode) -> GateVerdict:
    """Quick compile + format feedback for one edited file (advisory)."""
    if not path or not str(path).strip():
        return GateVerdict(decision="not_applicable", blocking=False)

    file_path = Path(path)
    if not file_path.is_absolute():
        file_path = cwd / file_path

    if not is_elixir_source(file_path):
        return GateVerdict(decision="not_applicable", blocking=False, advisories=(NOT_ELIXIR_SOURCE,))

    project = detect_project(cwd)
    if project is None:
        return GateVerdict(decision="not_applicable", blocking=False, advisories=(NOT_A_PROJECT,))

    if mode.pipeline != "spike-skip" and not mode.validate_on_edit:
        return GateVerdict(
            decision="skipped",
            blocking=False,
            advisories=(EDIT_VALIDATION_DISABLED,),
            project_root=project.root,
        )

    verdict = run_pipeline(mode, cwd, SAFE_CHECKS, file_path=file_path, blocking=False)
    # Advisory regardless of what the pipeline reported.
    return dataclasses.replace(verdict, blocking=False)


def on_command_proposed(raw: str | None, cwd: Path, mode: GateMode) -> CommandVerdict:
    """Classify a proposed shell command (blocking on ``block``)."""
    if not raw or not raw.strip():
        return CommandVerdict(decision="not_applicable", reason="No command provided")

    if detect_project(cwd) is None:
        return CommandVerdict(decision="not_applicable", reason=NOT_A_PROJECT)

    verdict = check_command(raw, mode, cwd)
    logger.debug("command %r -> %s (%s)", raw, verdict.decision, verdict.rule_id)
    return verdict


def is_commit_or_push(raw: str | None) -> bool:
    """True when the (unwrapped) command runs ``git commit`` or ``git push``."""
    if not raw:
        return False
    spec = parse_command(raw, resolve(raw))
    for seg in spec.segments:
        invocation = git_invocation(seg)
        if invocation and invocation[0] in ("commit", "push"):
            return True
    return False


def exit_code_for(verdict: GateVerdict | CommandVerdict) -> int:
    """Map a verdict to the hook exit code (2 blocks the caller)."""
    if isinstance(verdict, CommandVerdict):
        return EXIT_BLOCKED if verdict.blocking else EXIT_PROCEED
    return EXIT_BLOCKED if verdict.blocks else EXIT_PROCEED
