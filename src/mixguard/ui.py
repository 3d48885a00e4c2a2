"""Console rendering for verdicts.

Diagnostics go to stderr so hook callers can surface them; stdout is
reserved for machine-readable output (``--json``, session payloads).
"""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from mixguard.bootstrap import RULES_BANNER, SessionContext
from mixguard.complexity import SUGGESTIONS, ComplexityFinding
from mixguard.quality.checks import CHECKS
from mixguard.quality.pipeline import GateVerdict
from mixguard.safety.types import CommandVerdict

console = Console(stderr=True, highlight=False, soft_wrap=True)
stdout_console = Console(highlight=False, soft_wrap=True)

STATUS_SYMBOLS = {
    "pass": "✅",
    "fail": "❌",
    "not_applicable": "⚠️ ",
}

MAX_OUTPUT_LINES = 40


def _tail(output: str, limit: int = MAX_OUTPUT_LINES) -> str:
    lines = output.rstrip().splitlines()
    if len(lines) <= limit:
        return "\n".join(lines)
    return "\n".join([f"... ({len(lines) - limit} lines omitted)", *lines[-limit:]])


def render_command_verdict(verdict: CommandVerdict, out: Console | None = None) -> None:
    out = out or console
    if verdict.decision == "block":
        out.print(Text("🛡️  BLOCKED by Safety Net", style="bold red"))
        out.print(Text(f"Reason: {verdict.reason}", style="red"))
        if verdict.alternative:
            out.print(Text(f"Consider: {verdict.alternative}", style="yellow"))
    elif verdict.decision == "warn":
        out.print(Text(f"⚠️  Warning: {verdict.reason}", style="yellow"))
        if verdict.command is not None:
            out.print(Text(f"Command: {verdict.command.resolved}", style="yellow"))
        if verdict.alternative:
            out.print(Text(f"Consider: {verdict.alternative}", style="yellow"))


def render_gate_verdict(verdict: GateVerdict, title: str, out: Console | None = None) -> None:
    """Per-check lines in execution order, then the overall outcome."""
    out = out or console
    for advisory in verdict.advisories:
        out.print(Text(f"⚠️  {advisory}", style="yellow"))

    if verdict.decision in ("skipped", "not_applicable"):
        return

    out.print(Text(title, style="bold"))
    total = len(verdict.checks)
    for index, check in enumerate(verdict.checks, start=1):
        definition = CHECKS[check.name]
        out.print(f"{index}/{total} {definition.label}...")
        if check.status == "pass":
            out.print(Text(f"{STATUS_SYMBOLS['pass']} {definition.pass_message}", style="green"))
        elif check.status == "not_applicable":
            out.print(Text(f"{STATUS_SYMBOLS['not_applicable']} {check.remediation_hint} (skipping)", style="yellow"))
        else:
            if check.output.strip():
                out.print(Text(_tail(check.output), style="dim"))
            out.print(Text(f"{STATUS_SYMBOLS['fail']} {definition.fail_message}", style="red"))
            out.print(Text(f"   Fix: {check.remediation_hint}", style="yellow"))

    if verdict.decision == "pass":
        out.print(Text("✅ All checks passed.", style="bold green"))
    elif verdict.blocking:
        out.print(Text("🚫 BLOCKED: quality checks failed. Fix all issues above, then try again.", style="bold red"))
    else:
        out.print(Text("⚠️  Checks reported issues (advisory, not blocking).", style="yellow"))


def render_session(context: SessionContext, out: Console | None = None) -> None:
    """Rules and warnings go to stdout, where session-start output is read."""
    out = out or stdout_console
    out.print(Text(RULES_BANNER))
    present = context.present_rules
    if present:
        out.print(Text(f"Standing rules loaded: {', '.join(present)}", style="cyan"))
    for warning in context.warnings:
        out.print(Text(f"⚠️  {warning}", style="yellow"))


def render_findings(findings: list[ComplexityFinding], out: Console | None = None) -> None:
    out = out or console
    kinds_seen: list[str] = []
    for finding in findings:
        out.print(Text(f"⚠️  {finding.message}", style="yellow"))
        if finding.kind not in kinds_seen:
            kinds_seen.append(finding.kind)
    for kind in kinds_seen:
        out.print(Text(SUGGESTIONS[kind], style="dim"))  # type: ignore[index]
