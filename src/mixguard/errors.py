"""Exceptions surfaced to the CLI as tooling errors (exit code 1)."""

from __future__ import annotations


class MixguardError(RuntimeError):
    """Base class for mixguard tooling errors."""


class HookPayloadError(MixguardError):
    """Raised when the hook JSON payload cannot be decoded."""


class ConfigError(MixguardError):
    """Raised when .mixguard.yaml is unreadable or malformed."""
