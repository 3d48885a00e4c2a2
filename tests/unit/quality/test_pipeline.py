"""Unit tests for the quality gate pipeline."""

from __future__ import annotations

from pathlib import Path

import pytest

from mixguard.mode import GateMode
from mixguard.quality.checks import ALL_CHECKS, CHECKS, MIX_MISSING_HINT
from mixguard.quality.pipeline import (
    SAFE_ADVISORY,
    SPIKE_ADVISORY,
    run_pipeline,
    select_checks,
)

COMPILE = CHECKS["compile"].command
FORMAT = CHECKS["format"].command
CREDO = CHECKS["lint"].command
CREDO_PROBE = CHECKS["lint"].probe
TEST = CHECKS["test"].command


def test_all_checks_pass(mix_project: Path, mix_stub) -> None:
    mix_stub.all_pass()
    verdict = run_pipeline(GateMode(), mix_project)

    assert verdict.decision == "pass"
    assert [c.name for c in verdict.checks] == list(ALL_CHECKS)
    assert all(c.status == "pass" for c in verdict.checks)
    assert verdict.project_root == mix_project.resolve()
    assert not verdict.blocks


def test_format_failure_with_lint_missing(mix_project: Path, mix_stub) -> None:
    mix_stub.set(COMPILE, 0).set(FORMAT, 1, "lib/demo.ex needs formatting").set(CREDO_PROBE, 1).set(TEST, 0)

    verdict = run_pipeline(GateMode(), mix_project)

    assert verdict.decision == "fail"
    assert [(c.name, c.status) for c in verdict.checks] == [
        ("compile", "pass"),
        ("format", "fail"),
        ("lint", "not_applicable"),
        ("test", "pass"),
    ]
    assert verdict.summary() == {"passed": 2, "failed": 1, "not_applicable": 1}
    format_result = verdict.checks[1]
    assert "lib/demo.ex needs formatting" in format_result.output
    assert "mix format" in format_result.remediation_hint
    assert "credo" in verdict.checks[2].remediation_hint
    assert verdict.blocks


def test_no_short_circuit_after_early_failure(mix_project: Path, mix_stub) -> None:
    mix_stub.all_pass().set(COMPILE, 1, "warning: unused variable")

    verdict = run_pipeline(GateMode(), mix_project)

    assert verdict.decision == "fail"
    assert mix_stub.keys_called == [COMPILE, FORMAT, CREDO_PROBE, CREDO, TEST]
    assert [c.status for c in verdict.checks] == ["fail", "pass", "pass", "pass"]
    assert "--warnings-as-errors" in verdict.checks[0].remediation_hint


def test_every_failure_gets_its_own_hint(mix_project: Path, mix_stub) -> None:
    for key in (COMPILE, FORMAT, CREDO, TEST):
        mix_stub.set(key, 1)
    mix_stub.set(CREDO_PROBE, 0)

    verdict = run_pipeline(GateMode(), mix_project)

    assert len(verdict.failed) == 4
    hints = [c.remediation_hint for c in verdict.failed]
    assert all(hints)
    assert len(set(hints)) == 4


def test_lint_failure_counts(mix_project: Path, mix_stub) -> None:
    mix_stub.all_pass().set(CREDO, 1, "┃ [R] Modules should have a @moduledoc tag.")
    verdict = run_pipeline(GateMode(), mix_project)
    assert verdict.decision == "fail"
    assert verdict.checks[2].status == "fail"


def test_safe_mode_runs_compile_and_format_only(mix_project: Path, mix_stub) -> None:
    # No lint/test outcomes registered: the stub fails the test if they run.
    mix_stub.set(COMPILE, 0).set(FORMAT, 0)

    verdict = run_pipeline(GateMode(pipeline="safe"), mix_project)

    assert verdict.decision == "pass"
    assert [c.name for c in verdict.checks] == ["compile", "format"]
    assert mix_stub.keys_called == [COMPILE, FORMAT]
    assert SAFE_ADVISORY in verdict.advisories


def test_safe_mode_failure_still_fails(mix_project: Path, mix_stub) -> None:
    mix_stub.set(COMPILE, 0).set(FORMAT, 1)
    verdict = run_pipeline(GateMode(pipeline="safe", strict=True), mix_project)
    assert verdict.decision == "fail"


@pytest.mark.parametrize(
    "mode",
    [
        GateMode(pipeline="spike-skip"),
        GateMode(pipeline="spike-skip", strict=True, paranoid=True),
        GateMode(pipeline="spike-skip", validate_on_edit=False),
    ],
)
def test_spike_mode_skips_everything(mix_project: Path, mix_stub, mode: GateMode) -> None:
    verdict = run_pipeline(mode, mix_project)

    assert verdict.decision == "skipped"
    assert verdict.checks == ()
    assert mix_stub.calls == []
    assert SPIKE_ADVISORY in verdict.advisories
    assert not verdict.blocks


def test_not_a_project_is_not_applicable(plain_dir: Path, mix_stub) -> None:
    verdict = run_pipeline(GateMode(), plain_dir)

    assert verdict.decision == "not_applicable"
    assert mix_stub.calls == []
    assert not verdict.blocks


def test_project_found_from_subdirectory(mix_project: Path, mix_stub) -> None:
    mix_stub.all_pass()
    verdict = run_pipeline(GateMode(), mix_project / "lib")
    assert verdict.project_root == mix_project.resolve()
    assert mix_stub.calls


def test_missing_mix_executable_is_a_failed_check(mix_project: Path, mix_stub) -> None:
    mix_stub.all_pass().fail_to_launch(COMPILE, FileNotFoundError(2, "No such file", "mix"))

    verdict = run_pipeline(GateMode(), mix_project)

    assert verdict.decision == "fail"
    compile_result = verdict.checks[0]
    assert compile_result.status == "fail"
    assert compile_result.remediation_hint == MIX_MISSING_HINT
    assert len(verdict.checks) == 4


def test_per_file_checks_receive_the_file(mix_project: Path, mix_stub) -> None:
    mix_stub.all_pass().set(FORMAT, 1)
    target = mix_project / "lib" / "demo.ex"

    verdict = run_pipeline(GateMode(), mix_project, ("compile", "format"), file_path=target)

    assert (*FORMAT, str(target)) in mix_stub.calls
    assert COMPILE in mix_stub.calls
    assert str(target) in verdict.checks[1].remediation_hint


def test_select_checks_keeps_canonical_order() -> None:
    assert select_checks(GateMode(), ["test", "compile"]) == ("compile", "test")


def test_select_checks_safe_mode_never_adds() -> None:
    assert select_checks(GateMode(pipeline="safe"), ["lint", "test"]) == ()
    assert select_checks(GateMode(pipeline="safe"), ["format"]) == ("format",)


def test_select_checks_rejects_unknown_names() -> None:
    with pytest.raises(ValueError, match="Unknown checks"):
        select_checks(GateMode(), ["dialyzer"])  # type: ignore[list-item]


def test_verdict_to_dict_is_serializable(mix_project: Path, mix_stub) -> None:
    mix_stub.all_pass()
    data = run_pipeline(GateMode(), mix_project).to_dict()
    assert data["decision"] == "pass"
    assert data["summary"]["passed"] == 4
    assert data["project_root"] == str(mix_project.resolve())
    assert data["checks"][0]["name"] == "compile"
