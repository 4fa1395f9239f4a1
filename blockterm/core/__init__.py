"""
Core functionality for blockterm.
"""

from .config import (
    AiCommandTemplate,
    AiConfig,
    AppConfig,
    ConfigManager,
    ResolvedAiCommand,
    SessionConfig,
    TerminalConfig,
)
from .exceptions import (
    BlocktermError,
    ConfigurationError,
    CorruptedSessionError,
    SessionError,
    SessionNotFoundError,
    SessionSaveError,
)
from .logging import get_logger, setup_logging

__all__ = [
    "AiCommandTemplate",
    "AiConfig",
    "AppConfig",
    "BlocktermError",
    "ConfigManager",
    "ConfigurationError",
    "CorruptedSessionError",
    "ResolvedAiCommand",
    "SessionConfig",
    "SessionError",
    "SessionNotFoundError",
    "SessionSaveError",
    "TerminalConfig",
    "get_logger",
    "setup_logging",
]
