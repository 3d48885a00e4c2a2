"""Destructive command detection."""

from mixguard.safety.classifier import check_command, classify
from mixguard.safety.resolver import MAX_DEPTH, resolve, unwrap
from mixguard.safety.types import CommandSpec, CommandVerdict, Rule

__all__ = [
    "MAX_DEPTH",
    "CommandSpec",
    "CommandVerdict",
    "Rule",
    "check_command",
    "classify",
    "resolve",
    "unwrap",
]
