"""
Presentation helpers: tab strip state and Rich renderables for the timeline.
"""

from .tabs import TabEntry, TabState
from .timeline_view import render_command_block, render_history, render_timeline

__all__ = [
    "TabEntry",
    "TabState",
    "render_command_block",
    "render_history",
    "render_timeline",
]
