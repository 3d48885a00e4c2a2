"""Compile / format / lint / test quality gate."""

from mixguard.quality.checks import ALL_CHECKS, CHECKS, SAFE_CHECKS, CheckResult, run_check
from mixguard.quality.pipeline import GateVerdict, run_pipeline, select_checks

__all__ = [
    "ALL_CHECKS",
    "CHECKS",
    "SAFE_CHECKS",
    "CheckResult",
    "GateVerdict",
    "run_check",
    "run_pipeline",
    "select_checks",
]
