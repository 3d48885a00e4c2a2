"""Command classification: allow / block / warn."""

from __future__ import annotations

import logging
from pathlib import Path

from mixguard.mode import GateMode
from mixguard.safety.parser import parse_command, with_segments
from mixguard.safety.resolver import MAX_DEPTH, unwrap
from mixguard.safety.rules import (
    RULES,
    RuleContext,
    has_denylist_keyword,
    has_dry_run_flag,
)
from mixguard.safety.types import CommandSpec, CommandVerdict

logger = logging.getLogger(__name__)

UNCLASSIFIED_REASON = "Could not fully classify command containing dangerous keywords"
UNCLASSIFIED_STRICT_ALTERNATIVE = "Review command carefully, or disable SAFETY_NET_STRICT"
UNCLASSIFIED_ALTERNATIVE = "Review command carefully before running it"


def _fallback(
    spec: CommandSpec,
    mode: GateMode,
    detail: str | None = None,
    text: str | None = None,
) -> CommandVerdict:
    """Policy for commands no rule matched."""
    if not has_denylist_keyword(spec.resolved if text is None else text):
        return CommandVerdict(decision="allow", command=spec)

    reason = UNCLASSIFIED_REASON if detail is None else f"{UNCLASSIFIED_REASON} ({detail})"
    if mode.strict:
        return CommandVerdict(
            decision="block",
            reason=f"{reason} in strict mode",
            alternative=UNCLASSIFIED_STRICT_ALTERNATIVE,
            rule_id="strict-unclassified",
            command=spec,
        )
    if not spec.parsed or detail is not None:
        return CommandVerdict(
            decision="warn",
            reason=reason,
            alternative=UNCLASSIFIED_ALTERNATIVE,
            rule_id="unclassified",
            command=spec,
        )
    return CommandVerdict(decision="allow", command=spec)


def classify_spec(
    spec: CommandSpec,
    mode: GateMode,
    cwd: Path,
    *,
    detail: str | None = None,
) -> CommandVerdict:
    """Classify an already-parsed command.

    Segments carrying a dry-run flag are exempt; the rules see only the
    remaining segments. ``detail`` marks a command that is only partly
    understood (nesting past the bound): rules still apply, and when none
    matches it goes to the unclassifiable fallback.
    """
    active = with_segments(spec, [seg for seg in spec.segments if not has_dry_run_flag(seg)])
    if spec.segments and not active.segments:
        logger.debug("dry-run flag present, allowing: %s", spec.resolved)
        return CommandVerdict(decision="allow", reason="dry-run", command=spec)
    text = spec.resolved if len(active.segments) == len(spec.segments) else " ".join(active.tokens)

    ctx = RuleContext(mode=mode, cwd=cwd)
    for predicate, rule in RULES:
        try:
            matched = predicate(active, ctx)
        except Exception as e:
            logger.debug("rule %s failed on %r: %s", rule.id, spec.resolved, e)
            return _fallback(spec, mode, detail=f"rule {rule.id} could not evaluate", text=text)
        if matched:
            logger.debug("rule %s matched: %s", rule.id, spec.resolved)
            return CommandVerdict(
                decision="block",
                reason=rule.reason,
                alternative=rule.alternative,
                rule_id=rule.id,
                command=spec,
            )

    return _fallback(spec, mode, detail=detail, text=text)


def classify(
    resolved: str,
    mode: GateMode | None = None,
    cwd: Path | None = None,
    *,
    raw: str | None = None,
    depth: int = 0,
) -> CommandVerdict:
    """Classify a resolved (already unwrapped) command string.

    Never raises: input that cannot be tokenized is still checked on a
    best-effort basis and otherwise falls through to the strict-mode
    fallback policy.
    """
    mode = mode or GateMode()
    cwd = cwd or Path.cwd()
    spec = parse_command(raw if raw is not None else resolved, resolved, depth)
    return classify_spec(spec, mode, cwd)


def check_command(raw: str, mode: GateMode | None = None, cwd: Path | None = None) -> CommandVerdict:
    """Resolve wrappers in ``raw`` and classify the result."""
    mode = mode or GateMode()
    cwd = cwd or Path.cwd()
    unwrapped = unwrap(raw)
    spec = parse_command(raw, unwrapped.command, unwrapped.depth)
    detail = None
    if unwrapped.exhausted:
        logger.debug("nesting deeper than %d levels: %s", MAX_DEPTH, raw)
        detail = f"nested deeper than {MAX_DEPTH} levels"
    return classify_spec(spec, mode, cwd, detail=detail)
