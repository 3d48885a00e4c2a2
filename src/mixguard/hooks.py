"""Hook payload decoding.

The assistant passes a JSON object on stdin for each hook event. Older
hook wiring passes the command or file path through environment
variables instead; those are accepted as fallbacks.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from mixguard.errors import HookPayloadError

COMMAND_ENV = "BASH_COMMAND_TO_VALIDATE"
FILE_PATH_ENV = "CLAUDE_TOOL_FILE_PATH"

EDIT_TOOLS = ("Edit", "Write", "MultiEdit")


@dataclass(frozen=True)
class HookPayload:
    """Fields of a hook event that the gates care about."""

    event: str = ""
    tool_name: str = ""
    command: str = ""
    file_path: str = ""
    cwd: Path | None = None


def parse_hook_payload(text: str, env: Mapping[str, str] | None = None) -> HookPayload:
    """Decode a hook payload, falling back to environment variables.

    Raises:
        HookPayloadError: when ``text`` is non-empty and not a JSON object
    """
    env = env or {}
    data: dict = {}
    if text.strip():
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as e:
            raise HookPayloadError(f"Invalid hook JSON on stdin: {e}") from e
        if not isinstance(decoded, dict):
            raise HookPayloadError("Hook payload must be a JSON object")
        data = decoded

    tool_input = data.get("tool_input")
    if not isinstance(tool_input, dict):
        tool_input = {}

    command = tool_input.get("command") or env.get(COMMAND_ENV, "")
    file_path = (
        tool_input.get("file_path")
        or tool_input.get("notebook_path")
        or env.get(FILE_PATH_ENV, "")
    )
    cwd = data.get("cwd")

    return HookPayload(
        event=str(data.get("hook_event_name", "")),
        tool_name=str(data.get("tool_name", "")),
        command=str(command),
        file_path=str(file_path),
        cwd=Path(cwd) if isinstance(cwd, str) and cwd else None,
    )
