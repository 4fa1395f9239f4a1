"""
Fixed-size text viewport derived from an ordered sequence of lines.
"""

from __future__ import annotations

from collections.abc import Sequence

DEFAULT_WIDTH = 140
DEFAULT_HEIGHT = 120


def fit_lines(lines: Sequence[str], width: int, height: int) -> list[str]:
    """Keep the last ``height`` lines, each cut to ``width`` characters."""
    if width <= 0 or height <= 0:
        return []
    start = max(0, len(lines) - height)
    return [line[:width] for line in lines[start:]]


class TextGrid:
    """
    Width x height window over a line sequence.

    The grid keeps only the last derived view; it never retains the source,
    so callers re-apply :meth:`set_lines` whenever the source or the size
    changes.
    """

    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT):
        self._width = width
        self._height = height
        self._lines: list[str] = []

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def set_lines(self, lines: Sequence[str]) -> list[str]:
        self._lines = fit_lines(lines, self._width, self._height)
        return self.lines

    def resize(self, width: int, height: int) -> None:
        """Change dimensions; the current view is stale until the next set_lines."""
        self._width = width
        self._height = height
