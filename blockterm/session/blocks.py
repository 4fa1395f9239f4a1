"""
Shell command records.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from typing import Any


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


@dataclass
class CommandBlock:
    """A submitted shell command together with the output it produced."""

    id: int
    command: str
    working_directory: str
    output_lines: list[str] = field(default_factory=list)
    bookmarked: bool = False
    exit_code: int | None = None
    duration_ms: int | None = None
    timestamp_unix_ms: int = field(default_factory=now_ms)

    @property
    def is_running(self) -> bool:
        return self.exit_code is None

    def append_output(self, lines: Iterable[str]) -> None:
        self.output_lines.extend(lines)

    def finish(self, exit_code: int, duration_ms: int) -> None:
        self.exit_code = exit_code
        self.duration_ms = duration_ms

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommandBlock":
        return cls(
            id=int(data["id"]),
            command=data["command"],
            working_directory=data.get("working_directory", ""),
            output_lines=list(data.get("output_lines", [])),
            bookmarked=bool(data.get("bookmarked", False)),
            exit_code=data.get("exit_code"),
            duration_ms=data.get("duration_ms"),
            timestamp_unix_ms=int(data["timestamp_unix_ms"]),
        )
