"""
Capacity-bounded scrollback of completed lines.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator

DEFAULT_CAPACITY = 20_000


class ScrollbackBuffer:
    """Insertion-ordered line store that evicts the oldest line when full."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Scrollback capacity must be positive, got {capacity}")
        self._lines: deque[str] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._lines.maxlen

    def push_line(self, line: str) -> None:
        self._lines.append(line)

    def extend(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.push_line(line)

    def tail(self, max_lines: int) -> list[str]:
        """Return the most recent ``max_lines`` lines, oldest first."""
        if max_lines <= 0:
            return []
        start = max(0, len(self._lines) - max_lines)
        return list(self._lines)[start:]

    def clear(self) -> None:
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._lines))
