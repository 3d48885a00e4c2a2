"""Types for command classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

CommandDecision = Literal["allow", "block", "warn", "not_applicable"]
RuleFamily = Literal["git", "filesystem", "datastore"]


@dataclass(frozen=True)
class Segment:
    """One simple command out of a compound command line.

    ``program`` is the basename of the executable after stripping
    environment assignments and wrappers such as ``sudo``; ``args`` are
    the tokens that follow it.
    """

    tokens: tuple[str, ...]
    program: str
    args: tuple[str, ...]


@dataclass(frozen=True)
class CommandSpec:
    """Normalized view of a proposed command."""

    raw: str
    resolved: str
    depth: int
    segments: tuple[Segment, ...]
    parsed: bool = True
    targets: tuple[str, ...] = ()

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(tok for seg in self.segments for tok in seg.tokens)


@dataclass(frozen=True)
class Rule:
    """Static classification rule."""

    id: str
    family: RuleFamily
    reason: str
    alternative: str | None = None
    severity: Literal["block"] = "block"


@dataclass(frozen=True)
class CommandVerdict:
    """Outcome of classifying one proposed command."""

    decision: CommandDecision
    reason: str = ""
    alternative: str | None = None
    rule_id: str | None = None
    command: CommandSpec | None = field(default=None, compare=False)

    @property
    def blocking(self) -> bool:
        return self.decision == "block"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "decision": self.decision,
            "reason": self.reason,
            "alternative": self.alternative,
            "rule_id": self.rule_id,
        }
        if self.command is not None:
            data["resolved"] = self.command.resolved
            data["depth"] = self.command.depth
            data["targets"] = list(self.command.targets)
        return data
