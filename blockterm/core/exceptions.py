"""
Custom exceptions for blockterm.

The in-memory model never raises: unknown ids and degenerate input come back
as ``False``/``None``. These exceptions belong to the I/O edge (config files,
snapshot files, the CLI) and carry user-facing text for display.
"""


class BlocktermError(Exception):
    """Base exception for blockterm errors."""


class ConfigurationError(BlocktermError):
    """Error in configuration."""


# Session persistence errors


class SessionError(BlocktermError):
    """Base exception for session errors."""


class SessionSaveError(SessionError):
    """Error saving a session snapshot."""

    def __init__(self, message: str):
        super().__init__(f"Failed to save session: {message}")
        self.user_message = "Could not save the terminal session. Please check file permissions."
        self.recovery_hint = "Try saving to a different location or check disk space."


class SessionNotFoundError(SessionError):
    """Session snapshot file not found."""

    def __init__(self, session_path: str):
        super().__init__(f"Session not found: {session_path}")
        self.session_path = session_path
        self.user_message = f"Session file '{session_path}' does not exist."
        self.recovery_hint = "Check the path, or point session.session_file at an existing snapshot."


class CorruptedSessionError(SessionError):
    """Session snapshot file is corrupted."""

    def __init__(self, details: str):
        super().__init__(f"Session file is corrupted: {details}")
        self.user_message = "The session file appears to be corrupted."
        self.recovery_hint = "You may need to delete this session file and start fresh."
