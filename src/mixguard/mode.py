"""Gate mode resolution.

Every invocation resolves a single ``GateMode`` from the environment and
passes it down explicitly. Library code never consults ``os.environ``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

PipelineMode = Literal["normal", "safe", "spike-skip"]
GateModeName = Literal["normal", "safe", "spike-skip", "strict", "paranoid"]

SPIKE_ENV = "ELIXIR_SPIKE_MODE"
SAFE_ENV = "ELIXIR_SAFE_MODE"
STRICT_ENV = "SAFETY_NET_STRICT"
PARANOID_ENV = "SAFETY_NET_PARANOID"
VALIDATE_ON_EDIT_ENV = "ELIXIR_VALIDATE_ON_EDIT"

DEFAULT_TEMP_ROOTS: tuple[str, ...] = ("/tmp", "/var/tmp")


def _flag(env: Mapping[str, str], key: str, default: str = "0") -> bool:
    return env.get(key, default).strip() == "1"


@dataclass(frozen=True)
class GateMode:
    """Process-wide gate configuration for one invocation."""

    pipeline: PipelineMode = "normal"
    strict: bool = False
    paranoid: bool = False
    validate_on_edit: bool = True
    temp_roots: tuple[str, ...] = DEFAULT_TEMP_ROOTS

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "GateMode":
        """Resolve mode from environment toggles (``os.environ`` by default)."""
        source = os.environ if env is None else env

        pipeline: PipelineMode = "normal"
        if _flag(source, SPIKE_ENV):
            pipeline = "spike-skip"
        elif _flag(source, SAFE_ENV):
            pipeline = "safe"

        temp_roots = DEFAULT_TEMP_ROOTS
        tmpdir = source.get("TMPDIR", "").strip()
        if tmpdir:
            normalized = os.path.normpath(tmpdir)
            if normalized not in temp_roots and normalized != "/":
                temp_roots = (*temp_roots, normalized)

        return cls(
            pipeline=pipeline,
            strict=_flag(source, STRICT_ENV),
            paranoid=_flag(source, PARANOID_ENV),
            validate_on_edit=_flag(source, VALIDATE_ON_EDIT_ENV, default="1"),
            temp_roots=temp_roots,
        )

    @property
    def name(self) -> GateModeName:
        """Single-valued view, precedence spike-skip > safe > paranoid > strict."""
        if self.pipeline != "normal":
            return self.pipeline
        if self.paranoid:
            return "paranoid"
        if self.strict:
            return "strict"
        return "normal"
