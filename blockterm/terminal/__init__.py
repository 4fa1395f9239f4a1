"""
Terminal output processing: stream parsing, scrollback and viewport sizing.
"""

from .grid import TextGrid, fit_lines
from .scrollback import ScrollbackBuffer
from .vt_parser import MinimalVtParser, ParseState

__all__ = ["MinimalVtParser", "ParseState", "ScrollbackBuffer", "TextGrid", "fit_lines"]
