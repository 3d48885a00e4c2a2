"""Nested command unwrapping.

Wrapper invocations such as ``bash -c '...'`` or
``python -c 'os.system("...")'`` hide the real command from pattern
checks. ``unwrap`` peels them off one layer per iteration, up to
``MAX_DEPTH`` layers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

MAX_DEPTH = 5

_SHELL_WRAPPER = re.compile(
    r"(?P<lead>^|[\s;&|(])(?:\S*/)?(?:bash|sh|zsh|fish|dash|ksh)"
    r"(?:\s+-[a-z]+)*?\s+-[a-z]*c\s+(?P<quote>['\"])(?P<inner>.*)(?P=quote)",
    re.DOTALL,
)
_INTERPRETER_WRAPPER = re.compile(
    r"(?P<lead>^|[\s;&|(])(?:\S*/)?(?:python[0-9.]*|perl|ruby|node)\s+-[ce]\s+(?P<quote>['\"])(?P<inner>.*)(?P=quote)",
    re.DOTALL,
)
_SUBPROCESS_CALL = re.compile(
    r"(?:os\.system|os\.popen|subprocess\.\w+|execSync|spawnSync|exec|system)\((?P<arg>.*)\)",
    re.DOTALL,
)
_QUOTED = re.compile(r"""(['"])(?P<body>(?:\\.|(?!\1).)*)\1""", re.DOTALL)


def _call_argument(arg: str) -> str:
    """Turn the argument of a subprocess call into a command string."""
    arg = arg.strip()
    if arg.startswith("["):
        closing = arg.find("]")
        listing = arg[1:closing] if closing != -1 else arg[1:]
        parts = [m.group("body") for m in _QUOTED.finditer(listing)]
        return " ".join(parts) if parts else listing.strip()

    first = _QUOTED.match(arg)
    if first:
        return first.group("body")
    return arg


def _splice(command: str, match: re.Match, inner: str) -> str:
    """Replace the wrapper invocation with its inner command in place.

    Segments before and after the wrapper (``rm -rf x; bash -c 'ls'``)
    stay part of the command.
    """
    return command[:match.end("lead")] + inner + command[match.end():]


def _unwrap_once(command: str) -> str | None:
    """Return ``command`` with one wrapper layer peeled off, or None."""
    match = _SHELL_WRAPPER.search(command)
    if match:
        quote = match.group("quote")
        return _splice(command, match, match.group("inner").replace("\\" + quote, quote))

    match = _INTERPRETER_WRAPPER.search(command)
    if match:
        quote = match.group("quote")
        inner = match.group("inner").replace("\\" + quote, quote)
        call = _SUBPROCESS_CALL.search(inner)
        if call:
            return _splice(command, match, _call_argument(call.group("arg")))
    return None


@dataclass(frozen=True)
class Unwrapped:
    """Result of unwrapping a command line."""

    command: str
    depth: int
    exhausted: bool = False


def unwrap(raw: str, max_depth: int = MAX_DEPTH) -> Unwrapped:
    """Unwrap nested shell/interpreter wrappers with an explicit bound.

    When the command is still wrapped after ``max_depth`` layers the
    input is returned unchanged and ``exhausted`` is set, so callers can
    treat it as unclassifiable instead of inspecting a half-unwrapped
    string.
    """
    current = raw
    depth = 0
    while True:
        inner = _unwrap_once(current)
        if inner is None or inner == current:
            return Unwrapped(command=current, depth=depth)
        if depth == max_depth:
            return Unwrapped(command=raw, depth=depth, exhausted=True)
        current = inner
        depth += 1


def resolve(raw: str) -> str:
    """Return the innermost command of ``raw``."""
    return unwrap(raw).command
