"""mixguard CLI - hook entry points for command safety and quality gates."""

import json
import logging
import os
import sys
from pathlib import Path

import typer
from rich.logging import RichHandler

from mixguard import __version__
from mixguard.bootstrap import bootstrap, session_end_payload
from mixguard.complexity import analyze_file
from mixguard.config import load_config
from mixguard.controller import (
    EXIT_PROCEED,
    EXIT_TOOLING_ERROR,
    exit_code_for,
    is_commit_or_push,
    on_command_proposed,
    on_file_changed,
    on_pre_commit_or_push,
)
from mixguard.errors import MixguardError
from mixguard.hooks import COMMAND_ENV, EDIT_TOOLS, FILE_PATH_ENV, parse_hook_payload
from mixguard.mode import GateMode
from mixguard.project import detect_project
from mixguard.ui import (
    console,
    render_command_verdict,
    render_findings,
    render_gate_verdict,
    render_session,
)

cli = typer.Typer(
    name="mixguard",
    help="mixguard - command safety net and quality gates for mix projects",
    no_args_is_help=True,
)
hook_app = typer.Typer(help="Entry points that read the hook JSON payload from stdin.")
cli.add_typer(hook_app, name="hook")


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@cli.callback()
def _cli_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log rule matches and check execution to stderr.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show mixguard version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    """Resolve the gate mode once for this invocation."""
    _ = version
    _configure_logging(verbose)
    ctx.obj = GateMode.from_env()


def _mode(ctx: typer.Context) -> GateMode:
    if isinstance(ctx.obj, GateMode):
        return ctx.obj
    return GateMode.from_env()


def _resolve_cwd(cwd: Path | None) -> Path:
    return (cwd or Path.cwd()).resolve()


def _echo_json(data: dict) -> None:
    typer.echo(json.dumps(data, indent=2, sort_keys=True, default=str))


@cli.command(name="check-command")
def check_command_cmd(
    ctx: typer.Context,
    command: str | None = typer.Argument(
        None,
        help=f"Command to classify (default: ${COMMAND_ENV})",
    ),
    cwd: Path | None = typer.Option(None, "--cwd", help="Working directory the command would run in"),
    as_json: bool = typer.Option(False, "--json", help="Print the verdict as JSON on stdout"),
) -> None:
    """Classify a proposed shell command and block destructive ones.

    Exit codes:
      0 - Command may run (allowed, warned, or not applicable)
      2 - Command blocked
    """
    mode = _mode(ctx)
    raw = command if command is not None else os.environ.get(COMMAND_ENV, "")
    verdict = on_command_proposed(raw, _resolve_cwd(cwd), mode)

    if as_json:
        _echo_json(verdict.to_dict())
    render_command_verdict(verdict)
    raise typer.Exit(code=exit_code_for(verdict))


@cli.command(name="pre-commit")
def pre_commit_cmd(
    ctx: typer.Context,
    cwd: Path | None = typer.Option(None, "--cwd", help="Project directory (default: current directory)"),
    as_json: bool = typer.Option(False, "--json", help="Print the verdict as JSON on stdout"),
) -> None:
    """Run the blocking quality gate (compile, format, lint, test).

    Exit codes:
      0 - All checks passed, skipped (spike mode), or not a mix project
      2 - One or more checks failed; the commit/push must not proceed
    """
    mode = _mode(ctx)
    verdict = on_pre_commit_or_push(_resolve_cwd(cwd), mode)

    if as_json:
        _echo_json(verdict.to_dict())
    render_gate_verdict(verdict, "🔒 Precommit gate: running full quality checks before commit...")
    raise typer.Exit(code=exit_code_for(verdict))


@cli.command(name="file-changed")
def file_changed_cmd(
    ctx: typer.Context,
    path: str | None = typer.Argument(None, help=f"Edited file (default: ${FILE_PATH_ENV})"),
    cwd: Path | None = typer.Option(None, "--cwd", help="Project directory (default: current directory)"),
    as_json: bool = typer.Option(False, "--json", help="Print the verdict as JSON on stdout"),
) -> None:
    """Quick compile + format feedback for an edited file. Never blocks."""
    mode = _mode(ctx)
    target = path if path is not None else os.environ.get(FILE_PATH_ENV, "")
    verdict = on_file_changed(target, _resolve_cwd(cwd), mode)
    if as_json:
        _echo_json(verdict.to_dict())
    render_gate_verdict(verdict, "🔍 Validating edited file...")
    raise typer.Exit(code=EXIT_PROCEED)


@cli.command(name="session-start")
def session_start_cmd(
    cwd: Path | None = typer.Option(None, "--cwd", help="Project directory (default: current directory)"),
) -> None:
    """Print standing rules and environment warnings. Never blocks."""
    context = bootstrap(_resolve_cwd(cwd))
    render_session(context)
    raise typer.Exit(code=EXIT_PROCEED)


@cli.command(name="session-end")
def session_end_cmd() -> None:
    """Emit the session-end reminder payload on stdout."""
    _echo_json(session_end_payload())


@cli.command(name="complexity")
def complexity_cmd(
    path: Path = typer.Argument(..., help="Elixir source file to analyze"),
) -> None:
    """Warn about long functions, deep nesting and wide parameter lists.

    Advisory only: always exits 0 unless the configuration is unreadable.
    """
    project = detect_project(path.resolve().parent) if path.exists() else None
    try:
        config = load_config(project.root if project else None)
    except MixguardError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=EXIT_TOOLING_ERROR) from e

    findings = analyze_file(path, config.complexity)
    if findings:
        render_findings(findings)
    raise typer.Exit(code=EXIT_PROCEED)


@hook_app.command(name="pre-tool-use")
def hook_pre_tool_use(ctx: typer.Context) -> None:
    """PreToolUse hook for Bash: safety net, then the commit/push gate.

    Exit codes:
      0 - Proceed
      2 - Blocked (destructive command or failed quality gate)
      1 - Tooling error (malformed payload)
    """
    mode = _mode(ctx)
    try:
        payload = parse_hook_payload(sys.stdin.read(), os.environ)
    except MixguardError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=EXIT_TOOLING_ERROR) from e

    if payload.tool_name and payload.tool_name != "Bash":
        raise typer.Exit(code=EXIT_PROCEED)

    cwd = _resolve_cwd(payload.cwd)
    verdict = on_command_proposed(payload.command, cwd, mode)
    render_command_verdict(verdict)
    if verdict.blocking:
        raise typer.Exit(code=exit_code_for(verdict))

    if is_commit_or_push(payload.command):
        gate = on_pre_commit_or_push(cwd, mode)
        render_gate_verdict(gate, "🔒 Precommit gate: running full quality checks before commit...")
        raise typer.Exit(code=exit_code_for(gate))

    raise typer.Exit(code=EXIT_PROCEED)


@hook_app.command(name="post-tool-use")
def hook_post_tool_use(ctx: typer.Context) -> None:
    """PostToolUse hook for Edit/Write: advisory per-file checks. Never blocks."""
    mode = _mode(ctx)
    try:
        payload = parse_hook_payload(sys.stdin.read(), os.environ)
    except MixguardError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=EXIT_TOOLING_ERROR) from e

    if payload.tool_name and payload.tool_name not in EDIT_TOOLS:
        raise typer.Exit(code=EXIT_PROCEED)

    verdict = on_file_changed(payload.file_path, _resolve_cwd(payload.cwd), mode)
    render_gate_verdict(verdict, "🔍 Validating edited file...")
    raise typer.Exit(code=EXIT_PROCEED)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
