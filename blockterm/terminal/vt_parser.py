"""
Minimal VT stream parser.

Turns raw shell output into completed text lines plus one in-progress line.
Colour, cursor and OSC sequences are stripped, not interpreted; the only
cursor motion approximated is a bare carriage return, which makes the next
printable byte overwrite the line from column 0.
"""

from __future__ import annotations

from enum import Enum

ESC = 0x1B
BEL = 0x07
BACKSPACE = 0x08
TAB = 0x09
LF = 0x0A
CR = 0x0D

TAB_EXPANSION = "    "


class ParseState(Enum):
    """States of the escape-sequence state machine."""

    GROUND = "ground"
    ESCAPE = "escape"
    CSI = "csi"
    OSC = "osc"
    OSC_ESCAPE = "osc_escape"


class MinimalVtParser:
    """
    Byte-level state machine producing control-code-free lines.

    State survives between :meth:`feed` calls, so a sequence split across two
    chunks parses exactly like the unsplit input. Malformed input never
    raises; every state has a fallback back to ground.
    """

    def __init__(self) -> None:
        self._state = ParseState.GROUND
        self._line: list[str] = []
        self._saw_cr = False

    @property
    def state(self) -> ParseState:
        return self._state

    @property
    def current_line(self) -> str:
        """Output received since the last line feed."""
        return "".join(self._line)

    def reset(self) -> None:
        self._state = ParseState.GROUND
        self._line = []
        self._saw_cr = False

    def feed(self, chunk: bytes) -> list[str]:
        """Consume a chunk of raw bytes and return the lines it completed."""
        completed: list[str] = []

        for byte in chunk:
            state = self._state
            if state is ParseState.GROUND:
                self._ground(byte, completed)
            elif state is ParseState.ESCAPE:
                if byte == 0x5B:  # [
                    self._state = ParseState.CSI
                elif byte == 0x5D:  # ]
                    self._state = ParseState.OSC
                else:
                    self._state = ParseState.GROUND
            elif state is ParseState.CSI:
                if 0x40 <= byte <= 0x7E:
                    self._state = ParseState.GROUND
            elif state is ParseState.OSC:
                if byte == BEL:
                    self._state = ParseState.GROUND
                elif byte == ESC:
                    self._state = ParseState.OSC_ESCAPE
            else:
                # ESC \ is the string terminator; a stray ESC is swallowed.
                self._state = ParseState.GROUND if byte == 0x5C else ParseState.OSC

        return completed

    def _ground(self, byte: int, completed: list[str]) -> None:
        if byte == ESC:
            self._state = ParseState.ESCAPE
        elif byte == CR:
            self._saw_cr = True
        elif byte == LF:
            self._saw_cr = False
            completed.append("".join(self._line))
            self._line = []
        elif byte == BACKSPACE:
            self._saw_cr = False
            if self._line:
                self._line.pop()
        elif byte == TAB:
            if self._saw_cr:
                self._line = []
            self._saw_cr = False
            self._line.extend(TAB_EXPANSION)
        elif 0x20 <= byte <= 0x7E:
            if self._saw_cr:
                self._line = []
            self._saw_cr = False
            self._line.append(chr(byte))
