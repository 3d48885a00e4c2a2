"""Optional per-project configuration (.mixguard.yaml).

Only advisory behaviour is configurable: which standing-rule files the
session bootstrap looks for, which mix dependencies it expects, and the
complexity thresholds. Gate decisions are not configurable here.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mixguard.errors import ConfigError

CONFIG_FILENAME = ".mixguard.yaml"

DEFAULTS: dict[str, Any] = {
    "standing_rules": [
        "CLAUDE.md",
        ".claude/CLAUDE.md",
        "AGENTS.md",
        ".claude/project-learnings.md",
    ],
    "required_deps": {
        "credo": '{:credo, "~> 1.7", only: [:dev, :test], runtime: false}',
        "styler": '{:styler, "~> 1.0", only: [:dev, :test], runtime: false}',
    },
    "complexity": {
        "max_function_lines": 50,
        "max_indent": 20,
        "max_param_chars": 60,
    },
}


@dataclass(frozen=True)
class ComplexityThresholds:
    """Limits used by the complexity advisor."""

    max_function_lines: int = 50
    max_indent: int = 20
    max_param_chars: int = 60


@dataclass(frozen=True)
class GuardConfig:
    """Resolved advisory configuration."""

    standing_rules: tuple[str, ...] = tuple(DEFAULTS["standing_rules"])
    required_deps: dict[str, str] = field(default_factory=lambda: dict(DEFAULTS["required_deps"]))
    complexity: ComplexityThresholds = field(default_factory=ComplexityThresholds)

    @classmethod
    def from_dict(cls, data: dict) -> "GuardConfig":
        """Build config from a defaults-merged dict."""
        thresholds = data.get("complexity") or {}
        try:
            return cls(
                standing_rules=tuple(str(p) for p in data.get("standing_rules") or ()),
                required_deps={str(k): str(v) for k, v in (data.get("required_deps") or {}).items()},
                complexity=ComplexityThresholds(
                    max_function_lines=int(thresholds.get("max_function_lines", 50)),
                    max_indent=int(thresholds.get("max_indent", 20)),
                    max_param_chars=int(thresholds.get("max_param_chars", 60)),
                ),
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigError(f"Invalid {CONFIG_FILENAME}: {e}") from e


def load_config(project_root: Path | None) -> GuardConfig:
    """Load config from ``<project_root>/.mixguard.yaml`` or use defaults."""
    data = copy.deepcopy(DEFAULTS)
    if project_root is None:
        return GuardConfig.from_dict(data)

    path = project_root / CONFIG_FILENAME
    if not path.exists():
        return GuardConfig.from_dict(data)

    try:
        with open(path, encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    if user_config is None:
        return GuardConfig.from_dict(data)
    if not isinstance(user_config, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(user_config).__name__}")

    # Shallow overlay per section; complexity merges key by key.
    for key, value in user_config.items():
        if key == "complexity" and isinstance(value, dict):
            data["complexity"].update(value)
        else:
            data[key] = value
    return GuardConfig.from_dict(data)
