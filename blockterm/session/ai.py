"""
AI-tool invocation records.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .blocks import now_ms

FAILED_EXIT_CODE = -1


class AiTool(Enum):
    """External AI command-line tools that can be invoked from the timeline."""

    CLAUDE_CODE = "claude_code"
    CODEX_CLI = "codex_cli"

    @property
    def label(self) -> str:
        return _TOOL_LABELS[self]

    @property
    def binary_name(self) -> str:
        return _TOOL_BINARIES[self]


_TOOL_LABELS = {
    AiTool.CLAUDE_CODE: "Claude Code",
    AiTool.CODEX_CLI: "Codex CLI",
}

_TOOL_BINARIES = {
    AiTool.CLAUDE_CODE: "claude",
    AiTool.CODEX_CLI: "codex",
}


class AiBlockStatus(Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class AiBlock:
    """
    One asynchronous AI-tool invocation.

    ``context_block_ids`` names the command blocks attached to the prompt.
    They are not validated; ids that no longer resolve are skipped when the
    context payload is rendered.
    """

    id: int
    tool: AiTool
    prompt: str
    context_block_ids: list[int] = field(default_factory=list)
    output_lines: list[str] = field(default_factory=list)
    status: AiBlockStatus = AiBlockStatus.RUNNING
    exit_code: int | None = None
    started_unix_ms: int = field(default_factory=now_ms)
    duration_ms: int | None = None

    @property
    def is_running(self) -> bool:
        return self.status is AiBlockStatus.RUNNING

    def append_output_lines(self, lines: Iterable[str]) -> None:
        self.output_lines.extend(lines)

    def complete(self, exit_code: int, duration_ms: int) -> None:
        # No guard against a second call: the last outcome recorded wins.
        self.status = AiBlockStatus.COMPLETED
        self.exit_code = exit_code
        self.duration_ms = duration_ms

    def fail(self, message: str, duration_ms: int) -> None:
        self.status = AiBlockStatus.FAILED
        self.exit_code = FAILED_EXIT_CODE
        self.duration_ms = duration_ms
        self.output_lines.append(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tool": self.tool.value,
            "prompt": self.prompt,
            "context_block_ids": list(self.context_block_ids),
            "output_lines": list(self.output_lines),
            "status": self.status.value,
            "exit_code": self.exit_code,
            "started_unix_ms": self.started_unix_ms,
            "duration_ms": self.duration_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AiBlock":
        return cls(
            id=int(data["id"]),
            tool=AiTool(data["tool"]),
            prompt=data["prompt"],
            context_block_ids=[int(i) for i in data.get("context_block_ids", [])],
            output_lines=list(data.get("output_lines", [])),
            status=AiBlockStatus(data.get("status", AiBlockStatus.RUNNING.value)),
            exit_code=data.get("exit_code"),
            started_unix_ms=int(data["started_unix_ms"]),
            duration_ms=data.get("duration_ms"),
        )
