"""
Logging helpers for blockterm.

Every module grabs its logger through :func:`get_logger` so that all output
lives under the ``blockterm`` namespace. Hosts that want console output call
:func:`setup_logging` once; library use stays silent by default.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "blockterm"

_handler: RichHandler | None = None

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the ``blockterm`` namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(
    level: int | str = logging.WARNING,
    verbose: bool = False,
    console: Console | None = None,
) -> logging.Logger:
    """
    Install a Rich console handler on the package logger.

    Calling this more than once replaces the previous handler instead of
    stacking duplicates.

    Args:
        level: Log level used when ``verbose`` is False
        verbose: Force DEBUG level and show file paths
        console: Optional Rich console (defaults to stderr)

    Returns:
        The configured package logger
    """
    global _handler

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if _handler is not None:
        root.removeHandler(_handler)

    _handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    _handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(_handler)
    root.setLevel(logging.DEBUG if verbose else level)
    return root
