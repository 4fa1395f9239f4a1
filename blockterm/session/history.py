"""
Append-only log of submitted shell commands.
"""

from __future__ import annotations

from typing import Any


class CommandHistory:
    """
    Chronological record of every non-blank command.

    Duplicates are stored so the log stays an exact record; recall via
    :meth:`search` de-duplicates instead.
    """

    def __init__(self, commands: list[str] | None = None):
        self._commands: list[str] = list(commands or [])

    @property
    def commands(self) -> list[str]:
        return list(self._commands)

    def push(self, command: str) -> bool:
        """Record a command; blank commands are rejected. Returns True if stored."""
        if not command.strip():
            return False
        self._commands.append(command)
        return True

    def recent(self, max_items: int) -> list[str]:
        """Last ``max_items`` commands in chronological order."""
        if max_items <= 0:
            return []
        return self._commands[-max_items:]

    def search(self, query: str, max_items: int) -> list[str]:
        """
        Distinct commands containing ``query`` (case-insensitive), newest first.

        A blank query matches everything, so it doubles as "most recent
        distinct commands".
        """
        normalized = query.strip().lower()
        out: list[str] = []
        if max_items <= 0:
            return out

        for command in reversed(self._commands):
            if normalized and normalized not in command.lower():
                continue
            if command not in out:
                out.append(command)
            if len(out) >= max_items:
                break

        return out

    def __len__(self) -> int:
        return len(self._commands)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommandHistory):
            return NotImplemented
        return self._commands == other._commands

    def __repr__(self) -> str:
        return f"CommandHistory({self._commands!r})"

    def to_dict(self) -> dict[str, Any]:
        return {"commands": list(self._commands)}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "CommandHistory":
        return cls([str(c) for c in (data or {}).get("commands", [])])
