"""Pytest configuration and fixtures for mixguard tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from mixguard.exec import ExecResult

COMPILE = ("mix", "compile", "--warnings-as-errors")
FORMAT = ("mix", "format", "--check-formatted")
CREDO_PROBE = ("mix", "help", "credo")
CREDO = ("mix", "credo", "--strict")
TEST = ("mix", "test")

GATE_ENV_VARS = (
    "ELIXIR_SPIKE_MODE",
    "ELIXIR_SAFE_MODE",
    "SAFETY_NET_STRICT",
    "SAFETY_NET_PARANOID",
    "ELIXIR_VALIDATE_ON_EDIT",
    "BASH_COMMAND_TO_VALIDATE",
    "CLAUDE_TOOL_FILE_PATH",
)

MIX_EXS = """\
defmodule Demo.MixProject do
  use Mix.Project

  def project do
    [app: :demo, version: "0.1.0", deps: deps(), aliases: aliases()]
  end

  defp deps do
    [
      {:credo, "~> 1.7", only: [:dev, :test], runtime: false},
      {:styler, "~> 1.0", only: [:dev, :test], runtime: false}
    ]
  end

  defp aliases do
    [precommit: ["compile --warnings-as-errors", "format", "credo --strict", "test"]]
  end
end
"""


class MixStub:
    """Stands in for ``run_command``; keyed by the first three argv items."""

    def __init__(self) -> None:
        self.outcomes: dict[tuple[str, ...], tuple[int, str] | OSError] = {}
        self.calls: list[tuple[str, ...]] = []

    def set(self, key: tuple[str, ...], code: int, output: str = "") -> "MixStub":
        self.outcomes[key] = (code, output)
        return self

    def fail_to_launch(self, key: tuple[str, ...], error: OSError) -> "MixStub":
        self.outcomes[key] = error
        return self

    def all_pass(self) -> "MixStub":
        for key in (COMPILE, FORMAT, CREDO_PROBE, CREDO, TEST):
            self.set(key, 0)
        return self

    @property
    def keys_called(self) -> list[tuple[str, ...]]:
        return [call[:3] for call in self.calls]

    def __call__(self, argv: list[str], *, cwd: Path) -> ExecResult:
        self.calls.append(tuple(argv))
        key = tuple(argv[:3])
        if key not in self.outcomes:
            raise AssertionError(f"unexpected command: {argv}")
        outcome = self.outcomes[key]
        if isinstance(outcome, OSError):
            raise outcome
        code, output = outcome
        return ExecResult(argv=tuple(argv), cwd=cwd, returncode=code, stdout=output, stderr="")


@pytest.fixture(autouse=True)
def _clean_gate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in GATE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mix_stub(monkeypatch: pytest.MonkeyPatch) -> MixStub:
    stub = MixStub()
    monkeypatch.setattr("mixguard.quality.checks.run_command", stub)
    return stub


@pytest.fixture
def mix_project(tmp_path: Path) -> Path:
    root = tmp_path / "demo"
    (root / "lib").mkdir(parents=True)
    (root / "mix.exs").write_text(MIX_EXS, encoding="utf-8")
    (root / ".formatter.exs").write_text(
        '[\n  plugins: [Styler],\n  inputs: ["*.{ex,exs}", "{config,lib,test}/**/*.{ex,exs}"]\n]\n',
        encoding="utf-8",
    )
    (root / "lib" / "demo.ex").write_text("defmodule Demo do\nend\n", encoding="utf-8")
    return root


@pytest.fixture
def plain_dir(tmp_path: Path) -> Path:
    root = tmp_path / "plain"
    root.mkdir()
    return root


def pytest_sessionfinish(session, exitstatus):
    """Fail the run if --cov was requested but no coverage data was written."""
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)
    if not cov_enabled:
        return

    coverage_files = list(Path.cwd().glob(".coverage*"))
    if not coverage_files:
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "Check that tests import from 'mixguard' (the package) not 'src/mixguard' (filesystem path).",
            returncode=1,
        )
