"""
blockterm - block-structured terminal session core.

Turns raw shell output into clean lines, keeps a bounded scrollback, and
organizes a session into a searchable, exportable timeline of shell commands
and AI-tool runs.
"""

__version__ = "0.1.0"

# session must be imported before core: the config module depends on session.ai
from .session import (
    AiBlock,
    AiBlockStatus,
    AiTool,
    CommandBlock,
    CommandHistory,
    SessionSnapshot,
    SessionStore,
    SessionTimeline,
    TerminalSession,
    TimelineItem,
    TimelineKind,
)
from .core import AppConfig, ConfigManager, get_logger, setup_logging
from .terminal import MinimalVtParser, ScrollbackBuffer, TextGrid

__all__ = [
    "AiBlock",
    "AiBlockStatus",
    "AiTool",
    "AppConfig",
    "CommandBlock",
    "CommandHistory",
    "ConfigManager",
    "MinimalVtParser",
    "ScrollbackBuffer",
    "SessionSnapshot",
    "SessionStore",
    "SessionTimeline",
    "TerminalSession",
    "TextGrid",
    "TimelineItem",
    "TimelineKind",
    "__version__",
    "get_logger",
    "setup_logging",
]
