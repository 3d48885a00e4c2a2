"""Quality gate pipeline.

Runs the requested checks strictly in the order compile -> format ->
lint -> test and aggregates every result. A failing check never stops
the checks after it, so a single run reports everything that needs
fixing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Literal

from mixguard.mode import GateMode
from mixguard.project import detect_project
from mixguard.quality.checks import (
    ALL_CHECKS,
    CHECKS,
    SAFE_CHECKS,
    CheckName,
    CheckResult,
    run_check,
)

logger = logging.getLogger(__name__)

GateDecision = Literal["pass", "fail", "skipped", "not_applicable"]

SPIKE_ADVISORY = "SPIKE mode: precommit enforcement skipped. Debt tracked in .claude/spike-debt.md"
SAFE_ADVISORY = "Safe mode: only compile and format checks run; lint and tests are deferred"
NOT_A_PROJECT = "Not a mix project (no mix.exs found); quality gate not applicable"


@dataclass(frozen=True)
class GateVerdict:
    """Aggregated quality gate outcome."""

    decision: GateDecision
    checks: tuple[CheckResult, ...] = ()
    blocking: bool = True
    advisories: tuple[str, ...] = ()
    project_root: Path | None = None

    @property
    def failed(self) -> tuple[CheckResult, ...]:
        return tuple(c for c in self.checks if c.status == "fail")

    @property
    def blocks(self) -> bool:
        """True when the caller must not proceed."""
        return self.blocking and self.decision == "fail"

    def summary(self) -> dict[str, int]:
        return {
            "passed": sum(1 for c in self.checks if c.status == "pass"),
            "failed": sum(1 for c in self.checks if c.status == "fail"),
            "not_applicable": sum(1 for c in self.checks if c.status == "not_applicable"),
        }

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["project_root"] = str(self.project_root) if self.project_root else None
        data["summary"] = self.summary()
        return data


def select_checks(mode: GateMode, requested: Iterable[CheckName] = ALL_CHECKS) -> tuple[CheckName, ...]:
    """Checks to run for ``mode``, always in canonical order.

    Safe mode intersects the request with the fixed safe subset; it can
    only remove checks. Spike-skip selects nothing.
    """
    wanted = set(requested)
    unknown = wanted - set(ALL_CHECKS)
    if unknown:
        raise ValueError(f"Unknown checks: {sorted(unknown)}")
    if mode.pipeline == "spike-skip":
        return ()
    allowed = SAFE_CHECKS if mode.pipeline == "safe" else ALL_CHECKS
    return tuple(name for name in allowed if name in wanted)


def run_pipeline(
    mode: GateMode,
    cwd: Path,
    checks: Iterable[CheckName] = ALL_CHECKS,
    file_path: Path | None = None,
    *,
    blocking: bool = True,
) -> GateVerdict:
    """Run the quality gate in ``cwd``.

    Args:
        mode: Resolved gate mode
        cwd: Directory inside the project
        checks: Requested checks (filtered by mode, reordered canonically)
        file_path: Restrict per-file checks (format, lint) to this file
        blocking: Whether a ``fail`` verdict should stop the caller

    Returns:
        GateVerdict; ``not_applicable`` outside a mix project and
        ``skipped`` in spike mode, in both cases without launching any
        process.
    """
    project = detect_project(cwd)
    if project is None:
        logger.debug("no mix project at or above %s", cwd)
        return GateVerdict(decision="not_applicable", blocking=False, advisories=(NOT_A_PROJECT,))

    if mode.pipeline == "spike-skip":
        return GateVerdict(
            decision="skipped",
            blocking=False,
            advisories=(SPIKE_ADVISORY,),
            project_root=project.root,
        )

    selected = select_checks(mode, checks)
    advisories: list[str] = []
    if mode.pipeline == "safe":
        advisories.append(SAFE_ADVISORY)

    results: list[CheckResult] = []
    for name in selected:
        logger.debug("running %s in %s", name, project.root)
        result = run_check(CHECKS[name], project.root, file_path)
        logger.debug("%s -> %s", name, result.status)
        results.append(result)

    decision: GateDecision = "fail" if any(r.status == "fail" for r in results) else "pass"
    return GateVerdict(
        decision=decision,
        checks=tuple(results),
        blocking=blocking,
        advisories=tuple(advisories),
        project_root=project.root,
    )
