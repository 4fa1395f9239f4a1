"""
Session timeline: the aggregate that owns every work unit of a session.

- CommandBlock records for submitted shell commands
- AiBlock records for AI-tool invocations
- CommandHistory of submitted command strings
- The pending line (output not yet terminated by a line feed)

Command and AI ids come from two independent counters. Neither counter is
ever rewound, so ids stay unique for the life of the session even after
records are removed.

Readers only ever receive copies; mutation goes through the methods here.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..core.logging import get_logger
from .ai import AiBlock, AiBlockStatus, AiTool
from .blocks import CommandBlock, now_ms
from .export import blocks_to_markdown
from .history import CommandHistory
from .search import search_blocks

logger = get_logger(__name__)

FIRST_BLOCK_ID = 0
FIRST_AI_BLOCK_ID = 1

# Older snapshots opened every session with this placeholder record.
LEGACY_PLACEHOLDER_COMMAND = "<shell-session>"

CONTEXT_HEADER = "Attached terminal context blocks:"
CONTEXT_RULE = "=" * 32


class TimelineKind(Enum):
    """Kinds of timeline entries; the value is the tie-break rank."""

    COMMAND = 0
    AI = 1


@dataclass(frozen=True)
class TimelineItem:
    """One entry of the merged timeline, holding a copy of its record."""

    kind: TimelineKind
    block: CommandBlock | AiBlock

    @property
    def id(self) -> int:
        return self.block.id

    @property
    def timestamp_unix_ms(self) -> int:
        if isinstance(self.block, AiBlock):
            return self.block.started_unix_ms
        return self.block.timestamp_unix_ms

    def sort_key(self) -> tuple[int, int, int]:
        return (self.timestamp_unix_ms, self.kind.value, self.block.id)


@dataclass
class SessionSnapshot:
    """Complete serializable capture of a session timeline."""

    blocks: list[CommandBlock] = field(default_factory=list)
    ai_blocks: list[AiBlock] = field(default_factory=list)
    history: CommandHistory = field(default_factory=CommandHistory)
    next_block_id: int = FIRST_BLOCK_ID
    next_ai_block_id: int = FIRST_AI_BLOCK_ID
    pending_line: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "blocks": [block.to_dict() for block in self.blocks],
            "ai_blocks": [block.to_dict() for block in self.ai_blocks],
            "history": self.history.to_dict(),
            "next_block_id": self.next_block_id,
            "next_ai_block_id": self.next_ai_block_id,
            "pending_line": self.pending_line,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionSnapshot":
        history = data.get("history")
        if history is not None and not isinstance(history, dict):
            raise TypeError(f"history must be a mapping, got {type(history).__name__}")
        pending_line = data.get("pending_line") or ""
        if not isinstance(pending_line, str):
            raise TypeError(f"pending_line must be a string, got {type(pending_line).__name__}")

        return cls(
            blocks=[CommandBlock.from_dict(b) for b in data.get("blocks") or []],
            ai_blocks=[AiBlock.from_dict(b) for b in data.get("ai_blocks") or []],
            history=CommandHistory.from_dict(history),
            next_block_id=int(data.get("next_block_id", FIRST_BLOCK_ID)),
            next_ai_block_id=int(data.get("next_ai_block_id", FIRST_AI_BLOCK_ID)),
            pending_line=pending_line,
        )


def _is_legacy_placeholder(block: CommandBlock) -> bool:
    return (
        block.id == 0
        and block.command == LEGACY_PLACEHOLDER_COMMAND
        and not block.output_lines
        and not block.bookmarked
    )


class SessionTimeline:
    """
    Aggregate root for one terminal session.

    Single writer, no internal locking. Hosts that read from another thread
    should go through :class:`~blockterm.session.terminal_session.TerminalSession`.
    """

    def __init__(self, clock: Callable[[], int] | None = None):
        self._clock = clock or now_ms
        self._blocks: list[CommandBlock] = []
        self._ai_blocks: list[AiBlock] = []
        self._history = CommandHistory()
        self._next_block_id = FIRST_BLOCK_ID
        self._next_ai_block_id = FIRST_AI_BLOCK_ID
        self._pending_line = ""

    # ------------------------------------------------------------------
    # Command blocks
    # ------------------------------------------------------------------

    def start_command_block(self, command: str, cwd: str) -> int:
        """Open a new command block. Blank commands get a block but no history entry."""
        self._history.push(command)

        block_id = self._next_block_id
        self._blocks.append(
            CommandBlock(
                id=block_id,
                command=command,
                working_directory=cwd,
                timestamp_unix_ms=self._clock(),
            )
        )
        self._next_block_id += 1
        logger.debug("Started command block #%d: %s", block_id, command)
        return block_id

    def push_output_lines(self, lines: Sequence[str]) -> None:
        """Append output to the most recent command block; dropped if there is none."""
        if not lines or not self._blocks:
            return
        self._blocks[-1].append_output(lines)

    def finish_command_block(self, block_id: int, exit_code: int, duration_ms: int) -> bool:
        block = self._find_block(block_id)
        if block is None:
            return False
        block.finish(exit_code, duration_ms)
        logger.debug("Command block #%d exited with %d", block_id, exit_code)
        return True

    def toggle_bookmark(self, block_id: int) -> bool | None:
        """Flip the bookmark flag. Returns the new state, or None if the id is unknown."""
        block = self._find_block(block_id)
        if block is None:
            return None
        block.bookmarked = not block.bookmarked
        return block.bookmarked

    def remove_command_block(self, block_id: int) -> bool:
        original_len = len(self._blocks)
        self._blocks = [block for block in self._blocks if block.id != block_id]
        return len(self._blocks) != original_len

    def set_pending_line(self, line: str) -> None:
        self._pending_line = line

    @property
    def pending_line(self) -> str:
        return self._pending_line

    # ------------------------------------------------------------------
    # AI blocks
    # ------------------------------------------------------------------

    def start_ai_block(self, tool: AiTool, prompt: str, context_block_ids: Iterable[int]) -> int:
        ai_id = self._next_ai_block_id
        self._ai_blocks.append(
            AiBlock(
                id=ai_id,
                tool=tool,
                prompt=prompt,
                context_block_ids=list(context_block_ids),
                started_unix_ms=self._clock(),
            )
        )
        self._next_ai_block_id += 1
        logger.debug("Started AI block #%d with %s", ai_id, tool.label)
        return ai_id

    def append_ai_output_lines(self, ai_block_id: int, lines: Sequence[str]) -> bool:
        block = self._find_ai_block(ai_block_id)
        if block is None:
            return False
        block.append_output_lines(lines)
        return True

    def complete_ai_block(self, ai_block_id: int, exit_code: int, duration_ms: int) -> bool:
        block = self._find_ai_block(ai_block_id)
        if block is None:
            return False
        block.complete(exit_code, duration_ms)
        logger.debug("AI block #%d completed with %d in %dms", ai_block_id, exit_code, duration_ms)
        return True

    def fail_ai_block(self, ai_block_id: int, message: str, duration_ms: int) -> bool:
        block = self._find_ai_block(ai_block_id)
        if block is None:
            return False
        block.fail(message, duration_ms)
        logger.debug("AI block #%d failed: %s", ai_block_id, message)
        return True

    def remove_ai_block(self, ai_block_id: int) -> bool:
        original_len = len(self._ai_blocks)
        self._ai_blocks = [block for block in self._ai_blocks if block.id != ai_block_id]
        return len(self._ai_blocks) != original_len

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def blocks(self) -> tuple[CommandBlock, ...]:
        return tuple(copy.deepcopy(self._blocks))

    @property
    def ai_blocks(self) -> tuple[AiBlock, ...]:
        return tuple(copy.deepcopy(self._ai_blocks))

    @property
    def next_block_id(self) -> int:
        return self._next_block_id

    @property
    def next_ai_block_id(self) -> int:
        return self._next_ai_block_id

    def block_by_id(self, block_id: int) -> CommandBlock | None:
        block = self._find_block(block_id)
        return copy.deepcopy(block) if block is not None else None

    def ai_block_by_id(self, ai_block_id: int) -> AiBlock | None:
        block = self._find_ai_block(ai_block_id)
        return copy.deepcopy(block) if block is not None else None

    def block_count(self) -> int:
        return len(self._blocks)

    def ai_block_count(self) -> int:
        return len(self._ai_blocks)

    def bookmarked_count(self) -> int:
        return sum(1 for block in self._blocks if block.bookmarked)

    def running_ai_count(self) -> int:
        return sum(1 for block in self._ai_blocks if block.status is AiBlockStatus.RUNNING)

    def visible_lines(self, max_lines: int) -> list[str]:
        """Flattened transcript (``$ command`` then output), last ``max_lines`` lines."""
        if max_lines <= 0:
            return []

        all_lines: list[str] = []
        for block in self._blocks:
            if block.command:
                all_lines.append(f"$ {block.command}")
            all_lines.extend(block.output_lines)

        if self._pending_line:
            all_lines.append(self._pending_line)

        return all_lines[-max_lines:]

    def history_recent(self, max_items: int) -> list[str]:
        return self._history.recent(max_items)

    def history_search(self, query: str, max_items: int) -> list[str]:
        return self._history.search(query, max_items)

    def search_block_ids(self, query: str, max_items: int) -> list[int]:
        """Matching command block ids, most recent first."""
        ids = search_blocks(self._blocks, query)
        ids.reverse()
        return ids[: max(0, max_items)]

    def timeline_items(self) -> list[TimelineItem]:
        """All records merged by start time; commands sort before AI blocks on ties."""
        items = [TimelineItem(TimelineKind.COMMAND, copy.deepcopy(b)) for b in self._blocks]
        items.extend(TimelineItem(TimelineKind.AI, copy.deepcopy(b)) for b in self._ai_blocks)
        items.sort(key=TimelineItem.sort_key)
        return items

    def build_context_payload(self, block_ids: Sequence[int], max_lines_per_block: int) -> str:
        """Plain-text dossier of the given blocks, in the order supplied."""
        if not block_ids:
            return ""

        out = [f"{CONTEXT_HEADER}\n", f"{CONTEXT_RULE}\n"]
        for block_id in block_ids:
            block = self._find_block(block_id)
            if block is None:
                continue
            out.append(f"Block #{block.id}\n")
            out.append(f"Command: {block.command}\n")
            out.append(f"CWD: {block.working_directory}\n")
            out.append("Output:\n")
            tail = block.output_lines[-max_lines_per_block:] if max_lines_per_block > 0 else []
            out.extend(f"  {line}\n" for line in tail)
            out.append("\n")

        return "".join(out)

    def export_markdown(self, bookmarks_only: bool = False) -> str:
        blocks = self._blocks
        if bookmarks_only:
            blocks = [block for block in blocks if block.bookmarked]
        return blocks_to_markdown(blocks, self._pending_line)

    def clear_timeline(self) -> None:
        """Drop all records and the pending line; history and id counters survive."""
        self._blocks.clear()
        self._ai_blocks.clear()
        self._pending_line = ""

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def to_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            blocks=copy.deepcopy(self._blocks),
            ai_blocks=copy.deepcopy(self._ai_blocks),
            history=CommandHistory(self._history.commands),
            next_block_id=self._next_block_id,
            next_ai_block_id=self._next_ai_block_id,
            pending_line=self._pending_line,
        )

    @classmethod
    def from_snapshot(
        cls, snapshot: SessionSnapshot, clock: Callable[[], int] | None = None
    ) -> "SessionTimeline":
        """Restore a timeline, dropping the legacy placeholder block if it leads."""
        blocks = copy.deepcopy(snapshot.blocks)
        if blocks and _is_legacy_placeholder(blocks[0]):
            logger.debug("Dropping legacy %s placeholder block", LEGACY_PLACEHOLDER_COMMAND)
            blocks.pop(0)

        timeline = cls(clock=clock)
        timeline._blocks = blocks
        timeline._ai_blocks = copy.deepcopy(snapshot.ai_blocks)
        timeline._history = CommandHistory(snapshot.history.commands)
        # Counters stay ahead of every stored id.
        timeline._next_block_id = max(
            snapshot.next_block_id, max((b.id for b in snapshot.blocks), default=-1) + 1
        )
        timeline._next_ai_block_id = max(
            snapshot.next_ai_block_id, max((b.id for b in snapshot.ai_blocks), default=0) + 1
        )
        timeline._pending_line = snapshot.pending_line
        return timeline

    # ------------------------------------------------------------------

    def _find_block(self, block_id: int) -> CommandBlock | None:
        for block in self._blocks:
            if block.id == block_id:
                return block
        return None

    def _find_ai_block(self, ai_block_id: int) -> AiBlock | None:
        for block in self._ai_blocks:
            if block.id == ai_block_id:
                return block
        return None
