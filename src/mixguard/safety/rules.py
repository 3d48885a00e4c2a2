"""Destructive-command rule table.

Rules are ``(predicate, Rule)`` pairs evaluated in order against a
``CommandSpec``; the first predicate that returns True decides the
verdict.
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from mixguard.mode import GateMode
from mixguard.safety.parser import (
    is_recursive_force,
    long_flags,
    positional_args,
    short_flags,
)
from mixguard.safety.types import CommandSpec, Rule, Segment

DRY_RUN_FLAGS = ("--dry-run", "-n")
DENYLIST_KEYWORDS = ("rm", "delete", "drop", "truncate", "force", "reset", "clean")
SYSTEM_DIRS = ("/usr", "/etc", "/var", "/bin", "/sbin")

_GIT_OPTIONS_WITH_VALUE = {"-C", "-c", "--git-dir", "--work-tree", "--namespace", "--exec-path"}
_LEASE_FLAGS = ("--force-with-lease",)
_DENYLIST = re.compile(r"\b(?:" + "|".join(DENYLIST_KEYWORDS) + r")\b", re.IGNORECASE)

_SQL_DROP = re.compile(r"\bDROP\s+(?:DATABASE|TABLE|SCHEMA)\b")
_SQL_DROP_GUARDS = (
    re.compile(r"\bIF\s+EXISTS\b"),
    re.compile(r"\bBEGIN\b"),
    re.compile(r"\bTRANSACTION\b"),
)
_SQL_TRUNCATE = re.compile(r"\bTRUNCATE\s+TABLE\b")


@dataclass(frozen=True)
class RuleContext:
    """Evaluation context shared by all predicates."""

    mode: GateMode
    cwd: Path


Predicate = Callable[[CommandSpec, RuleContext], bool]


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def has_dry_run_flag(seg: Segment) -> bool:
    """True when the segment carries a recognized dry-run flag."""
    for token in seg.args:
        if token in DRY_RUN_FLAGS or token.startswith("--dry-run="):
            return True
    return False


def has_denylist_keyword(text: str) -> bool:
    return bool(_DENYLIST.search(text))


def git_invocation(seg: Segment) -> tuple[str, tuple[str, ...]] | None:
    """Split ``git [global opts] <sub> <args>`` into (sub, args)."""
    if seg.program != "git":
        return None
    args = seg.args
    index = 0
    while index < len(args):
        arg = args[index]
        if arg in _GIT_OPTIONS_WITH_VALUE:
            index += 2
            continue
        if arg.startswith("-"):
            index += 1
            continue
        return arg, tuple(args[index + 1:])
    return None


def _git_segments(spec: CommandSpec, subcommand: str):
    for seg in spec.segments:
        invocation = git_invocation(seg)
        if invocation and invocation[0] == subcommand:
            yield invocation[1]


def _normalize_target(target: str, cwd: Path) -> str | None:
    """Absolute, normalized form of a path argument, or None if unknowable."""
    if not target or target.startswith("~") or "$" in target or "`" in target:
        return None
    path = target if target.startswith("/") else posixpath.join(str(cwd), target)
    return posixpath.normpath(path)


def _within(path: str, root: str, *, strict: bool = False) -> bool:
    root = root.rstrip("/") or "/"
    if path == root:
        return not strict
    prefix = root if root.endswith("/") else root + "/"
    return path.startswith(prefix)


def is_safe_delete_target(target: str, ctx: RuleContext) -> bool:
    """Whether ``rm -rf target`` stays inside cwd or a temp directory.

    Paranoid mode only trusts temp directories.
    """
    path = _normalize_target(target, ctx.cwd)
    if path is None:
        return False

    for root in ctx.mode.temp_roots:
        if _within(path, root, strict=True):
            return True

    if ctx.mode.paranoid:
        return False

    cwd = posixpath.normpath(str(ctx.cwd))
    if cwd == "/":
        return False
    return _within(path, cwd)


# ---------------------------------------------------------------------------
# predicates
# ---------------------------------------------------------------------------


def git_reset_hard(spec: CommandSpec, ctx: RuleContext) -> bool:
    return any(
        "--hard" in long_flags(args) or "--merge" in long_flags(args)
        for args in _git_segments(spec, "reset")
    )


def git_force_push(spec: CommandSpec, ctx: RuleContext) -> bool:
    for args in _git_segments(spec, "push"):
        if any(arg.startswith(_LEASE_FLAGS) for arg in args):
            continue
        if "f" in short_flags(args) or "--force" in long_flags(args):
            return True
        if any(ref.startswith("+") for ref in positional_args(args)):
            return True
    return False


def git_stash_drop(spec: CommandSpec, ctx: RuleContext) -> bool:
    return any(args[:1] in (("drop",), ("clear",)) for args in _git_segments(spec, "stash"))


def git_branch_force_delete(spec: CommandSpec, ctx: RuleContext) -> bool:
    for args in _git_segments(spec, "branch"):
        chars = short_flags(args)
        longs = long_flags(args)
        if "D" in chars:
            return True
        deleting = "d" in chars or "--delete" in longs
        forced = "f" in chars or "--force" in longs
        if deleting and forced:
            return True
    return False


def git_checkout_discard(spec: CommandSpec, ctx: RuleContext) -> bool:
    return any("--" in args for args in _git_segments(spec, "checkout"))


def git_clean_force(spec: CommandSpec, ctx: RuleContext) -> bool:
    return any(
        "f" in short_flags(args) or "--force" in long_flags(args)
        for args in _git_segments(spec, "clean")
    )


def rm_outside_workspace(spec: CommandSpec, ctx: RuleContext) -> bool:
    return any(not is_safe_delete_target(target, ctx) for target in spec.targets)


def find_delete(spec: CommandSpec, ctx: RuleContext) -> bool:
    return any(seg.program == "find" and "-delete" in seg.args for seg in spec.segments)


def _rm_after(args: tuple[str, ...], start: int) -> bool:
    if start >= len(args) or posixpath.basename(args[start]) != "rm":
        return False
    return is_recursive_force(args[start + 1:])


def find_exec_rm(spec: CommandSpec, ctx: RuleContext) -> bool:
    for seg in spec.segments:
        if seg.program != "find":
            continue
        for index, arg in enumerate(seg.args):
            if arg in ("-exec", "-execdir", "-ok", "-okdir") and _rm_after(seg.args, index + 1):
                return True
    return False


def bulk_rm(spec: CommandSpec, ctx: RuleContext) -> bool:
    for seg in spec.segments:
        if seg.program not in ("xargs", "parallel"):
            continue
        for index, arg in enumerate(seg.args):
            if posixpath.basename(arg) == "rm":
                return _rm_after(seg.args, index)
    return False


def recursive_chmod_system(spec: CommandSpec, ctx: RuleContext) -> bool:
    for seg in spec.segments:
        if seg.program not in ("chmod", "chown", "chgrp"):
            continue
        if "R" not in short_flags(seg.args) and "--recursive" not in long_flags(seg.args):
            continue
        for target in positional_args(seg.args):
            # Only paths written as absolute; relative ones live under cwd.
            if not target.startswith("/"):
                continue
            path = posixpath.normpath(target)
            if path == "/" or any(_within(path, root) for root in SYSTEM_DIRS):
                return True
    return False


def _segment_text(spec: CommandSpec) -> str:
    return " ".join(spec.tokens)


def sql_drop(spec: CommandSpec, ctx: RuleContext) -> bool:
    text = _segment_text(spec)
    if not _SQL_DROP.search(text):
        return False
    return not any(guard.search(text) for guard in _SQL_DROP_GUARDS)


def sql_truncate(spec: CommandSpec, ctx: RuleContext) -> bool:
    return bool(_SQL_TRUNCATE.search(_segment_text(spec)))


RULES: tuple[tuple[Predicate, Rule], ...] = (
    (git_reset_hard, Rule(
        id="git-reset-hard",
        family="git",
        reason="git reset --hard/--merge destroys uncommitted changes",
        alternative="git stash or commit your changes first",
    )),
    (git_force_push, Rule(
        id="git-push-force",
        family="git",
        reason="git push --force rewrites remote history",
        alternative="Use --force-with-lease for safer force push, or coordinate with team",
    )),
    (git_stash_drop, Rule(
        id="git-stash-drop",
        family="git",
        reason="git stash drop/clear permanently deletes stashed changes",
        alternative="Review with git stash list and git stash show first",
    )),
    (git_branch_force_delete, Rule(
        id="git-branch-force-delete",
        family="git",
        reason="git branch -D force deletes branch without checking if merged",
        alternative="Use -d to safely delete only merged branches, or verify merge status first",
    )),
    (git_checkout_discard, Rule(
        id="git-checkout-discard",
        family="git",
        reason="git checkout -- discards uncommitted changes permanently",
        alternative="git stash to save changes, or commit them first",
    )),
    (git_clean_force, Rule(
        id="git-clean-force",
        family="git",
        reason="git clean -f permanently deletes untracked files",
        alternative="Review with git clean -n first, or git stash --include-untracked",
    )),
    (rm_outside_workspace, Rule(
        id="rm-recursive-outside",
        family="filesystem",
        reason="rm -rf on paths outside current directory or /tmp",
        alternative="Review the path carefully, or use git clean for repository cleanup",
    )),
    (find_delete, Rule(
        id="find-delete",
        family="filesystem",
        reason="find with -delete can remove many files at once",
        alternative="Test with -print first, then use -exec rm if needed",
    )),
    (find_exec_rm, Rule(
        id="find-exec-rm",
        family="filesystem",
        reason="find -exec rm -rf can remove many files recursively",
        alternative="Test with -print first, verify paths carefully",
    )),
    (bulk_rm, Rule(
        id="bulk-rm",
        family="filesystem",
        reason="xargs/parallel with rm -rf can remove many files at once",
        alternative="Review input list carefully, test with echo first",
    )),
    (recursive_chmod_system, Rule(
        id="recursive-chmod-system",
        family="filesystem",
        reason="Recursive chmod/chown on system directories can break your system",
        alternative="Be very specific with paths, or use sudo if truly needed",
    )),
    (sql_drop, Rule(
        id="sql-drop",
        family="datastore",
        reason="DROP DATABASE/TABLE without IF EXISTS or transaction",
        alternative="Add IF EXISTS clause, or wrap in transaction for safety",
    )),
    (sql_truncate, Rule(
        id="sql-truncate",
        family="datastore",
        reason="TRUNCATE TABLE permanently deletes all data",
        alternative="Use DELETE with WHERE clause if you need to keep some data, or backup first",
    )),
)
