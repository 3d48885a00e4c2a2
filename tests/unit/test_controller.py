"""Unit tests for the gate controller entry points."""

from __future__ import annotations

from pathlib import Path

import pytest

from mixguard.controller import (
    EDIT_VALIDATION_DISABLED,
    EXIT_BLOCKED,
    EXIT_PROCEED,
    NOT_ELIXIR_SOURCE,
    exit_code_for,
    is_commit_or_push,
    on_command_proposed,
    on_file_changed,
    on_pre_commit_or_push,
)
from mixguard.mode import GateMode
from mixguard.quality.checks import CHECKS

COMPILE = CHECKS["compile"].command
FORMAT = CHECKS["format"].command
TEST = CHECKS["test"].command


# on_pre_commit_or_push


def test_pre_commit_blocks_on_failing_test(mix_project: Path, mix_stub) -> None:
    mix_stub.all_pass().set(TEST, 1, "1 test, 1 failure")

    verdict = on_pre_commit_or_push(mix_project, GateMode())

    assert verdict.decision == "fail"
    assert verdict.blocks
    assert exit_code_for(verdict) == EXIT_BLOCKED


def test_pre_commit_passes(mix_project: Path, mix_stub) -> None:
    mix_stub.all_pass()
    verdict = on_pre_commit_or_push(mix_project, GateMode())
    assert exit_code_for(verdict) == EXIT_PROCEED


def test_pre_commit_spike_mode_proceeds(mix_project: Path, mix_stub) -> None:
    verdict = on_pre_commit_or_push(mix_project, GateMode(pipeline="spike-skip"))
    assert verdict.decision == "skipped"
    assert exit_code_for(verdict) == EXIT_PROCEED
    assert mix_stub.calls == []


# on_file_changed


def test_file_changed_failure_never_blocks(mix_project: Path, mix_stub) -> None:
    mix_stub.set(COMPILE, 0).set(FORMAT, 1, "lib/demo.ex is not formatted")

    verdict = on_file_changed("lib/demo.ex", mix_project, GateMode())

    assert verdict.decision == "fail"
    assert not verdict.blocking
    assert not verdict.blocks
    assert exit_code_for(verdict) == EXIT_PROCEED
    assert [c.name for c in verdict.checks] == ["compile", "format"]
    assert (*FORMAT, str(mix_project / "lib" / "demo.ex")) in mix_stub.calls


def test_file_changed_accepts_absolute_path(mix_project: Path, mix_stub) -> None:
    mix_stub.set(COMPILE, 0).set(FORMAT, 0)
    verdict = on_file_changed(mix_project / "lib" / "demo.ex", mix_project, GateMode())
    assert verdict.decision == "pass"


@pytest.mark.parametrize("path", [None, "", "   "])
def test_file_changed_without_path(mix_project: Path, mix_stub, path) -> None:
    verdict = on_file_changed(path, mix_project, GateMode())
    assert verdict.decision == "not_applicable"
    assert mix_stub.calls == []


def test_file_changed_ignores_non_elixir_files(mix_project: Path, mix_stub) -> None:
    verdict = on_file_changed("README.md", mix_project, GateMode())
    assert verdict.decision == "not_applicable"
    assert NOT_ELIXIR_SOURCE in verdict.advisories
    assert mix_stub.calls == []


def test_file_changed_disabled_by_env(mix_project: Path, mix_stub) -> None:
    mode = GateMode.from_env({"ELIXIR_VALIDATE_ON_EDIT": "0"})
    verdict = on_file_changed("lib/demo.ex", mix_project, mode)
    assert verdict.decision == "skipped"
    assert EDIT_VALIDATION_DISABLED in verdict.advisories
    assert mix_stub.calls == []


def test_file_changed_in_spike_mode_is_skipped(mix_project: Path, mix_stub) -> None:
    verdict = on_file_changed("lib/demo.ex", mix_project, GateMode(pipeline="spike-skip"))
    assert verdict.decision == "skipped"
    assert mix_stub.calls == []


# on_command_proposed


def test_command_blocked_in_project(mix_project: Path) -> None:
    verdict = on_command_proposed("git push --force origin main", mix_project, GateMode())
    assert verdict.decision == "block"
    assert "--force-with-lease" in verdict.alternative
    assert exit_code_for(verdict) == EXIT_BLOCKED


def test_command_allowed_in_project(mix_project: Path) -> None:
    verdict = on_command_proposed("mix deps.get", mix_project, GateMode())
    assert verdict.decision == "allow"
    assert exit_code_for(verdict) == EXIT_PROCEED


def test_warned_command_proceeds(mix_project: Path) -> None:
    verdict = on_command_proposed('echo "unterminated && rm -r build', mix_project, GateMode())
    assert verdict.decision == "warn"
    assert exit_code_for(verdict) == EXIT_PROCEED


@pytest.mark.parametrize("raw", [None, "", "  "])
def test_empty_command_is_not_applicable(mix_project: Path, raw) -> None:
    assert on_command_proposed(raw, mix_project, GateMode()).decision == "not_applicable"


# outside a mix project


def test_every_entry_point_not_applicable_outside_project(plain_dir: Path, mix_stub) -> None:
    mode = GateMode(strict=True, paranoid=True)
    (plain_dir / "app.ex").write_text("defmodule App do\nend\n", encoding="utf-8")

    gate = on_pre_commit_or_push(plain_dir, mode)
    edit = on_file_changed("app.ex", plain_dir, mode)
    command = on_command_proposed("git push --force origin main", plain_dir, mode)

    assert gate.decision == "not_applicable"
    assert edit.decision == "not_applicable"
    assert command.decision == "not_applicable"
    assert mix_stub.calls == []
    assert all(exit_code_for(v) == EXIT_PROCEED for v in (gate, edit, command))


# is_commit_or_push


@pytest.mark.parametrize(
    "raw",
    [
        "git commit -m 'wip'",
        "git push origin main",
        "mix format && git commit -am 'fix'",
        "git -C apps/web commit -m 'x'",
        "bash -c 'git push origin main'",
    ],
)
def test_commit_or_push_detected(raw: str) -> None:
    assert is_commit_or_push(raw)


@pytest.mark.parametrize(
    "raw",
    [None, "", "git status", "echo git commit", "git log --grep=push", "mix test"],
)
def test_other_commands_are_not_commit_or_push(raw) -> None:
    assert not is_commit_or_push(raw)
