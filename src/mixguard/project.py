"""Mix project detection."""

from dataclasses import dataclass
from pathlib import Path

PROJECT_MARKER = "mix.exs"
ELIXIR_SUFFIXES = (".ex", ".exs")


@dataclass(frozen=True)
class ProjectInfo:
    """Detected mix project."""

    root: Path
    marker: Path


def detect_project(start: Path) -> ProjectInfo | None:
    """Find the nearest mix project at or above ``start``.

    The search walks upward and stops at the first directory holding
    ``mix.exs``. It never crosses a repository boundary (a directory
    containing ``.git``) or the filesystem root.

    Returns:
        ProjectInfo, or None when ``start`` is not inside a mix project
    """
    current = start.resolve()
    if current.is_file():
        current = current.parent

    while True:
        marker = current / PROJECT_MARKER
        if marker.is_file():
            return ProjectInfo(root=current, marker=marker)

        if (current / ".git").exists():
            return None

        parent = current.parent
        if parent == current:
            return None
        current = parent


def is_elixir_source(path: Path) -> bool:
    """True for .ex/.exs files."""
    return path.suffix in ELIXIR_SUFFIXES
