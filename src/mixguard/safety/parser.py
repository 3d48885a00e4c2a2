"""Tokenize a command line into simple-command segments.

This is a bounded heuristic, not a shell grammar: ``shlex`` handles
quoting, and control operators (``;``, ``&&``, ``||``, ``|``, ``&``)
split segments. Redirections and their targets are dropped.
"""

from __future__ import annotations

import dataclasses
import posixpath
import re
import shlex

from mixguard.safety.types import CommandSpec, Segment

_CONTROL_CHARS = set(";&|()")
_REDIRECT = re.compile(r"^(?:[<>]+&?|&>>?)$")
_ASSIGNMENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*=")
_FALLBACK_SPLIT = re.compile(r"\|\||&&|[;|&]")

# Prefix commands that run their arguments as the real command.
_PASSTHROUGH = {"sudo", "doas", "env", "command", "builtin", "nohup", "time", "exec", "nice"}

RECURSIVE_FORCE_PROGRAMS = {"rm"}


def _tokenize(command: str) -> list[str]:
    lexer = shlex.shlex(command, posix=True, punctuation_chars=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    return list(lexer)


def _is_control(token: str) -> bool:
    return bool(token) and all(ch in _CONTROL_CHARS for ch in token)


def _split_segments(tokens: list[str]) -> list[list[str]]:
    segments: list[list[str]] = []
    current: list[str] = []
    skip_next = False
    for token in tokens:
        if skip_next:
            skip_next = False
            continue
        if _REDIRECT.match(token):
            # "2>" arrives as "2", ">"
            if current and current[-1].isdigit():
                current.pop()
            skip_next = True
            continue
        if _is_control(token):
            if current:
                segments.append(current)
            current = []
            continue
        current.append(token)
    if current:
        segments.append(current)
    return segments


def _fallback_segments(command: str) -> list[list[str]]:
    return [part.split() for part in _FALLBACK_SPLIT.split(command) if part.split()]


def build_segment(tokens: list[str]) -> Segment:
    """Identify the program of a simple command."""
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if _ASSIGNMENT.match(token):
            index += 1
            continue
        name = posixpath.basename(token)
        if name in _PASSTHROUGH:
            index += 1
            # Options of the prefix command itself, e.g. sudo -u root
            while index < len(tokens) and tokens[index].startswith("-"):
                index += 1
            continue
        break

    if index >= len(tokens):
        return Segment(tokens=tuple(tokens), program="", args=())
    return Segment(
        tokens=tuple(tokens),
        program=posixpath.basename(tokens[index]),
        args=tuple(tokens[index + 1:]),
    )


def short_flags(args: tuple[str, ...] | list[str]) -> set[str]:
    """Characters of single-dash option clusters (``-rf`` -> {r, f})."""
    chars: set[str] = set()
    for arg in args:
        if arg == "--":
            break
        if arg.startswith("-") and not arg.startswith("--") and len(arg) > 1:
            chars.update(arg[1:])
    return chars


def long_flags(args: tuple[str, ...] | list[str]) -> set[str]:
    """Double-dash options, without any ``=value`` part."""
    flags: set[str] = set()
    for arg in args:
        if arg == "--":
            break
        if arg.startswith("--"):
            flags.add(arg.split("=", 1)[0])
    return flags


def positional_args(args: tuple[str, ...] | list[str]) -> list[str]:
    """Non-option arguments; everything after ``--`` is positional."""
    result: list[str] = []
    options_done = False
    for arg in args:
        if not options_done and arg == "--":
            options_done = True
            continue
        if not options_done and arg.startswith("-") and arg != "-":
            continue
        result.append(arg)
    return result


def is_recursive_force(args: tuple[str, ...] | list[str]) -> bool:
    """True when rm-style options request both recursion and force."""
    chars = short_flags(args)
    longs = long_flags(args)
    recursive = "r" in chars or "R" in chars or "--recursive" in longs
    force = "f" in chars or "--force" in longs
    return recursive and force


def _rm_targets(segments: list[Segment]) -> tuple[str, ...]:
    targets: list[str] = []
    for seg in segments:
        if seg.program in RECURSIVE_FORCE_PROGRAMS and is_recursive_force(seg.args):
            targets.extend(positional_args(seg.args))
    return tuple(targets)


def with_segments(spec: CommandSpec, segments: list[Segment] | tuple[Segment, ...]) -> CommandSpec:
    """Copy of ``spec`` restricted to ``segments``, with targets recomputed."""
    return dataclasses.replace(spec, segments=tuple(segments), targets=_rm_targets(list(segments)))


def parse_command(raw: str, resolved: str | None = None, depth: int = 0) -> CommandSpec:
    """Build a ``CommandSpec`` for ``resolved`` (defaults to ``raw``).

    Tokenization failures (unbalanced quotes and the like) do not raise:
    the command falls back to whitespace splitting and ``parsed`` is
    False.
    """
    text = raw if resolved is None else resolved
    parsed = True
    try:
        token_groups = _split_segments(_tokenize(text))
    except ValueError:
        parsed = False
        token_groups = _fallback_segments(text)

    segments = [build_segment(group) for group in token_groups]
    return CommandSpec(
        raw=raw,
        resolved=text,
        depth=depth,
        segments=tuple(segments),
        parsed=parsed,
        targets=_rm_targets(segments),
    )
