"""Advisory complexity heuristics for Elixir source files.

Line-based approximations only: long functions, deep indentation and
wide parameter lists. Findings are warnings and never affect a gate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from mixguard.config import ComplexityThresholds
from mixguard.project import is_elixir_source

FindingKind = Literal["long_function", "deep_nesting", "many_params"]

MAX_REPORTED_PER_KIND = 5

SUGGESTIONS: dict[FindingKind, str] = {
    "long_function": "Consider breaking into smaller functions",
    "deep_nesting": "Consider extracting functions or using 'with' for railway-oriented programming",
    "many_params": "Consider using a map or struct to group parameters",
}

_DEF = re.compile(r"^\s*defp?\s")
_END = re.compile(r"^  end\s*$")
_HEADER = re.compile(r"defp?\s+[a-z_][A-Za-z0-9_]*[?!]?\((?P<params>[^)]*)\)")


@dataclass(frozen=True)
class ComplexityFinding:
    kind: FindingKind
    line: int
    message: str


def analyze_source(text: str, thresholds: ComplexityThresholds | None = None) -> list[ComplexityFinding]:
    """Run all heuristics over ``text``."""
    thresholds = thresholds or ComplexityThresholds()
    findings: list[ComplexityFinding] = []
    counts: dict[FindingKind, int] = {"long_function": 0, "deep_nesting": 0, "many_params": 0}
    indent_prefix = " " * thresholds.max_indent

    def add(kind: FindingKind, line: int, message: str) -> None:
        if counts[kind] < MAX_REPORTED_PER_KIND:
            findings.append(ComplexityFinding(kind=kind, line=line, message=message))
        counts[kind] += 1

    start: int | None = None
    for lineno, line in enumerate(text.splitlines(), start=1):
        if _DEF.match(line):
            start = lineno
        elif start is not None and _END.match(line):
            length = lineno - start
            if length > thresholds.max_function_lines:
                add("long_function", start, f"Function starting at line {start} is {length} lines")
            start = None

        if line.startswith(indent_prefix) and line.strip():
            add("deep_nesting", lineno, f"Line {lineno} is indented {len(line) - len(line.lstrip(' '))} spaces")

        header = _HEADER.search(line)
        if header and len(header.group("params")) >= thresholds.max_param_chars:
            add("many_params", lineno, f"Function at line {lineno} has a long parameter list")

    return findings


def analyze_file(path: Path, thresholds: ComplexityThresholds | None = None) -> list[ComplexityFinding] | None:
    """Analyze an Elixir file; None when the file is not applicable."""
    if not path.is_file() or not is_elixir_source(path):
        return None
    return analyze_source(path.read_text(encoding="utf-8", errors="replace"), thresholds)
