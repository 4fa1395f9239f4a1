"""
Session model: command and AI blocks, history, search, export and snapshots.
"""

from .ai import AiBlock, AiBlockStatus, AiTool
from .blocks import CommandBlock, now_ms
from .export import blocks_to_markdown
from .history import CommandHistory
from .search import search_blocks
from .timeline import SessionSnapshot, SessionTimeline, TimelineItem, TimelineKind
from .store import SessionStore
from .terminal_session import TerminalSession

__all__ = [
    "AiBlock",
    "AiBlockStatus",
    "AiTool",
    "CommandBlock",
    "CommandHistory",
    "SessionSnapshot",
    "SessionStore",
    "SessionTimeline",
    "TerminalSession",
    "TimelineItem",
    "TimelineKind",
    "blocks_to_markdown",
    "now_ms",
    "search_blocks",
]
