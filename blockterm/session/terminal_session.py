"""
Wiring between the byte stream and the session timeline.

:class:`TerminalSession` is what a host application drives: a reader thread
feeds raw shell output while the UI thread asks for viewports and snapshots.
Every call takes one re-entrant lock, which gives at-most-one writer and
readers that always see a consistent copy.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from threading import RLock

from ..core.config import AppConfig, ResolvedAiCommand
from ..core.logging import get_logger
from ..terminal import MinimalVtParser, ScrollbackBuffer, TextGrid
from .ai import AiTool
from .timeline import SessionSnapshot, SessionTimeline

logger = get_logger(__name__)


class TerminalSession:
    """Parser, scrollback, viewport and timeline behind one lock."""

    def __init__(
        self,
        timeline: SessionTimeline | None = None,
        config: AppConfig | None = None,
        clock: Callable[[], int] | None = None,
    ):
        self.config = config or AppConfig.default()
        terminal = self.config.terminal
        self._timeline = timeline or SessionTimeline(clock=clock)
        self._parser = MinimalVtParser()
        self._scrollback = ScrollbackBuffer(terminal.scrollback_capacity)
        self._grid = TextGrid(terminal.viewport_width, terminal.viewport_height)
        self._lock = RLock()

    @classmethod
    def from_config(
        cls, config: AppConfig, snapshot: SessionSnapshot | None = None
    ) -> "TerminalSession":
        timeline = SessionTimeline.from_snapshot(snapshot) if snapshot is not None else None
        return cls(timeline=timeline, config=config)

    @contextmanager
    def locked(self) -> Iterator[SessionTimeline]:
        """Hold the lock and expose the live timeline for a batch of calls."""
        with self._lock:
            yield self._timeline

    # ------------------------------------------------------------------
    # Writer side
    # ------------------------------------------------------------------

    def feed(self, chunk: bytes) -> list[str]:
        """Parse raw output into the scrollback and the current command block."""
        with self._lock:
            lines = self._parser.feed(chunk)
            self._scrollback.extend(lines)
            self._timeline.push_output_lines(lines)
            self._timeline.set_pending_line(self._parser.current_line)
            return lines

    def run_command(self, command: str, cwd: str) -> int:
        with self._lock:
            return self._timeline.start_command_block(command, cwd)

    def finish_command(self, block_id: int, exit_code: int, duration_ms: int) -> bool:
        with self._lock:
            found = self._timeline.finish_command_block(block_id, exit_code, duration_ms)
        if not found:
            logger.warning("Cannot finish unknown command block #%d", block_id)
        return found

    def toggle_bookmark(self, block_id: int) -> bool | None:
        with self._lock:
            state = self._timeline.toggle_bookmark(block_id)
        if state is None:
            logger.warning("Cannot bookmark unknown command block #%d", block_id)
        return state

    def start_ai(self, tool: AiTool, prompt: str, context_block_ids: Iterable[int]) -> int:
        with self._lock:
            return self._timeline.start_ai_block(tool, prompt, context_block_ids)

    def append_ai_output(self, ai_block_id: int, lines: list[str]) -> bool:
        with self._lock:
            found = self._timeline.append_ai_output_lines(ai_block_id, lines)
        if not found:
            logger.warning("Dropping output for unknown AI block #%d", ai_block_id)
        return found

    def complete_ai(self, ai_block_id: int, exit_code: int, duration_ms: int) -> bool:
        with self._lock:
            found = self._timeline.complete_ai_block(ai_block_id, exit_code, duration_ms)
        if not found:
            logger.warning("Cannot complete unknown AI block #%d", ai_block_id)
        return found

    def fail_ai(self, ai_block_id: int, message: str, duration_ms: int) -> bool:
        with self._lock:
            found = self._timeline.fail_ai_block(ai_block_id, message, duration_ms)
        if not found:
            logger.warning("Cannot fail unknown AI block #%d", ai_block_id)
        return found

    def resize(self, width: int, height: int) -> list[str]:
        with self._lock:
            self._grid.resize(width, height)
            return self._viewport_locked()

    def restore(self, snapshot: SessionSnapshot) -> None:
        """Replace the timeline; parser and scrollback start over."""
        with self._lock:
            self._timeline = SessionTimeline.from_snapshot(snapshot)
            self._parser.reset()
            self._scrollback.clear()

    # ------------------------------------------------------------------
    # Reader side
    # ------------------------------------------------------------------

    def viewport(self) -> list[str]:
        """Grid-sized view of the scrollback plus the in-progress line."""
        with self._lock:
            return self._viewport_locked()

    def tail(self, max_lines: int) -> list[str]:
        with self._lock:
            return self._scrollback.tail(max_lines)

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._timeline.to_snapshot()

    def context_payload(self, block_ids: list[int], max_lines_per_block: int | None = None) -> str:
        if max_lines_per_block is None:
            max_lines_per_block = self.config.session.context_lines_per_block
        with self._lock:
            return self._timeline.build_context_payload(block_ids, max_lines_per_block)

    def resolve_ai_command(self, tool: AiTool, prompt: str) -> ResolvedAiCommand:
        """Concrete program and argv for launching ``tool``; launching is the caller's job."""
        return self.config.ai.resolve(tool, prompt)

    def _viewport_locked(self) -> list[str]:
        lines = self._scrollback.tail(self._grid.height)
        current = self._parser.current_line
        if current:
            lines.append(current)
        return self._grid.set_lines(lines)
