"""Session bootstrap: standing rules and environment readiness.

Everything here is advisory. Nothing in this module can block a
session or write to the project.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mixguard.config import GuardConfig, load_config
from mixguard.errors import ConfigError
from mixguard.project import detect_project

logger = logging.getLogger(__name__)

RULES_BANNER = """\
## Elixir Production Plugin Active

### Non-Negotiable Rules

1. **Precommit before commit**: Run `mix precommit` (or `mix compile --warnings-as-errors && mix format && mix credo --strict && mix test`) before EVERY `git commit`. No exceptions.
2. **TDD**: Write tests before implementation. Red -> Green -> Refactor.
3. **Tagged tuples**: Use `{:ok, value}` / `{:error, reason}` for all fallible operations.
4. **Typespecs**: `@spec` on every public function.

### Before Any Commit

You MUST run `mix precommit` and verify it passes BEFORE running `git commit`.
If `mix precommit` fails, fix ALL failures before committing.

### Overrides

- `ELIXIR_SPIKE_MODE=1` skips the precommit gate (debt tracked in .claude/spike-debt.md)
- `ELIXIR_SAFE_MODE=1` runs compile and format only
- `SAFETY_NET_STRICT=1` blocks commands that cannot be fully classified
- `SAFETY_NET_PARANOID=1` also blocks `rm -rf` inside the working directory
"""

SESSION_END_CONTEXT = (
    "Session ending. If new patterns, conventions, or architectural decisions were "
    "discovered during this session, consider updating .claude/project-learnings.md "
    "using the /learn command."
)


@dataclass(frozen=True)
class SessionContext:
    """What the bootstrap found at session start."""

    cwd: Path
    project_root: Path | None = None
    rule_files: dict[str, bool] = field(default_factory=dict)
    warnings: tuple[str, ...] = ()

    @property
    def present_rules(self) -> list[str]:
        return [name for name, present in self.rule_files.items() if present]


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("could not read %s: %s", path, e)
        return ""


def _project_warnings(project_root: Path, config: GuardConfig) -> list[str]:
    warnings: list[str] = []
    mix_exs = _read_text(project_root / "mix.exs")

    if "precommit:" not in mix_exs:
        warnings.append("No 'precommit' alias found in mix.exs. Run /precommit to set one up.")

    for dep, snippet in config.required_deps.items():
        if f":{dep}" not in mix_exs:
            warnings.append(f"Missing :{dep} dependency. Add {snippet}")

    if "styler" in config.required_deps:
        formatter = project_root / ".formatter.exs"
        if not formatter.exists():
            warnings.append(
                "No .formatter.exs found. Create one with plugins: [Styler] and "
                'inputs: ["*.{ex,exs}", "{config,lib,test}/**/*.{ex,exs}"]'
            )
        elif "Styler" not in _read_text(formatter):
            warnings.append("Styler not configured in .formatter.exs. Add plugins: [Styler]")

    return warnings


def bootstrap(cwd: Path, config: GuardConfig | None = None) -> SessionContext:
    """Collect standing rules and readiness warnings for ``cwd``."""
    project = detect_project(cwd)
    base = project.root if project else cwd.resolve()
    warnings: list[str] = []

    if config is None:
        try:
            config = load_config(project.root if project else None)
        except ConfigError as e:
            warnings.append(f"{e}; using defaults")
            config = GuardConfig()

    rule_files = {name: (base / name).is_file() for name in config.standing_rules}

    if project is not None:
        warnings.extend(_project_warnings(project.root, config))

    return SessionContext(
        cwd=cwd,
        project_root=project.root if project else None,
        rule_files=rule_files,
        warnings=tuple(warnings),
    )


def session_end_payload() -> dict[str, Any]:
    """Hook output reminding the assistant to capture learnings."""
    return {
        "hookSpecificOutput": {
            "hookEventName": "SessionEnd",
            "additionalContext": SESSION_END_CONTEXT,
        }
    }
