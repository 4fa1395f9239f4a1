"""
Substring search over command blocks.
"""

from __future__ import annotations

from collections.abc import Iterable

from .blocks import CommandBlock


def block_matches(block: CommandBlock, needle: str) -> bool:
    """``needle`` must already be lower-cased."""
    if needle in block.command.lower():
        return True
    return any(needle in line.lower() for line in block.output_lines)


def search_blocks(blocks: Iterable[CommandBlock], query: str) -> list[int]:
    """Ids of blocks whose command or output contains ``query``, in block order."""
    if not query.strip():
        return []

    needle = query.lower()
    return [block.id for block in blocks if block_matches(block, needle)]
