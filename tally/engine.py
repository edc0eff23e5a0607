"""
Terminal Engine
================
The blessed-backed terminal backend: interactive mode switching,
double-buffered frame drawing and keyboard input.
"""

import os
from contextlib import ExitStack
from dataclasses import dataclass
from typing import List, Optional, Tuple

from blessed import Terminal

from .config import DEFAULT_COLOR
from .events import KeyEvent, decode_keystroke
from .exceptions import BackendError

# ValueError: I/O on a closed stream
if os.name != 'nt':
    import termios
    _TERMINAL_ERRORS: Tuple[type, ...] = (OSError, ValueError, termios.error)
else:
    _TERMINAL_ERRORS = (OSError, ValueError)


@dataclass
class Cell:
    """A single cell in the render buffer."""
    char: str = ' '
    fg_color: int = DEFAULT_COLOR
    bold: bool = False

    def matches(self, other: 'Cell') -> bool:
        """Check if two cells are visually identical."""
        return (
            self.char == other.char and
            self.fg_color == other.fg_color and
            self.bold == other.bold
        )

    def reset(self):
        self.char = ' '
        self.fg_color = DEFAULT_COLOR
        self.bold = False


class DoubleBuffer:
    """
    Double-buffered terminal renderer.

    Writes to a back buffer, then swaps to front buffer,
    only updating cells that changed. No screen clears needed.
    """

    def __init__(self, term: Terminal, width: int, height: int):
        self.term = term
        self.width = width
        self.height = height
        self.front: List[List[Cell]] = []
        self.back: List[List[Cell]] = []
        self._init_buffers()
        self._normal = term.normal

    def _init_buffers(self):
        self.front = [
            [Cell() for _ in range(self.width)]
            for _ in range(self.height)
        ]
        self.back = [
            [Cell() for _ in range(self.width)]
            for _ in range(self.height)
        ]

    def resize(self, width: int, height: int):
        self.width = width
        self.height = height
        self._init_buffers()

    def clear_back(self):
        """Clear the back buffer by resetting cells in-place."""
        for row in self.back:
            for cell in row:
                cell.reset()

    def put(self, x: int, y: int, char: str, fg_color: int = DEFAULT_COLOR,
            bold: bool = False):
        """Put a character in the back buffer, ignoring off-screen cells."""
        if 0 <= x < self.width and 0 <= y < self.height:
            cell = self.back[y][x]
            cell.char = char
            cell.fg_color = fg_color
            cell.bold = bold

    def put_string(self, x: int, y: int, text: str,
                   fg_color: int = DEFAULT_COLOR, bold: bool = False):
        for i, char in enumerate(text):
            self.put(x + i, y, char, fg_color, bold)

    def present(self) -> str:
        """Swap buffers and generate output for changed cells only."""
        output_parts = []
        normal = self._normal

        for y in range(self.height):
            for x in range(self.width):
                back_cell = self.back[y][x]
                front_cell = self.front[y][x]

                if not back_cell.matches(front_cell):
                    output_parts.append(self.term.move_xy(x, y))
                    # Reset attributes to prevent bleed
                    output_parts.append(normal)
                    if back_cell.bold:
                        output_parts.append(self.term.bold)
                    if back_cell.fg_color >= 0:
                        output_parts.append(self.term.color(back_cell.fg_color))
                    output_parts.append(back_cell.char or ' ')

        if output_parts:
            output_parts.append(normal)

        # Swap: back becomes the new front, old front becomes next back
        self.front, self.back = self.back, self.front

        return ''.join(output_parts)


class BlessedBackend:
    """
    Terminal backend over a blessed Terminal.

    Interactive mode is fullscreen (alternate screen) + raw or cbreak
    input + hidden cursor. The three blessed contexts are held open on an
    ExitStack so they can be entered and unwound as separate calls.
    """

    def __init__(self, term: Optional[Terminal] = None, input_mode: str = 'raw'):
        self.term = term if term is not None else Terminal()
        self.input_mode = input_mode
        self.buffer: Optional[DoubleBuffer] = None
        self._modes: Optional[ExitStack] = None

    @property
    def size(self) -> Tuple[int, int]:
        return self.term.width, self.term.height

    @property
    def interactive(self) -> bool:
        return self._modes is not None

    # -------------------------------------------------------------------------
    # Mode switching
    # -------------------------------------------------------------------------

    def _input_context(self):
        if self.input_mode == 'cbreak':
            return self.term.cbreak()
        return self.term.raw()

    def enter_interactive_mode(self) -> None:
        if self._modes is not None:
            return
        if not self.term.is_a_tty:
            raise BackendError('output is not a terminal')
        # No keyboard fd: stdin is not a tty and inkey() returns at once
        if self.term._keyboard_fd is None:
            raise BackendError('input is not a terminal')

        modes = ExitStack()
        try:
            modes.enter_context(self.term.fullscreen())
            modes.enter_context(self._input_context())
            modes.enter_context(self.term.hidden_cursor())
            self._write(self.term.home + self.term.clear)
        except BackendError:
            modes.close()
            raise
        except _TERMINAL_ERRORS as exc:
            modes.close()
            raise BackendError(f'cannot enter interactive mode: {exc}') from exc
        self._modes = modes
        self.buffer = None

    def restore_normal_mode(self) -> None:
        """Leave fullscreen, restore input mode and cursor. Safe to repeat."""
        modes, self._modes = self._modes, None
        try:
            if modes is not None:
                modes.close()
            print(self.term.normal, end='', file=self.term.stream, flush=True)
        except _TERMINAL_ERRORS as exc:
            raise BackendError(f'cannot restore terminal: {exc}') from exc

    # -------------------------------------------------------------------------
    # Drawing
    # -------------------------------------------------------------------------

    def _write(self, text: str) -> None:
        try:
            print(text, end='', file=self.term.stream, flush=True)
        except _TERMINAL_ERRORS as exc:
            raise BackendError(f'terminal write failed: {exc}') from exc

    def draw_frame(self, frame) -> None:
        """Draw a view.Frame, writing only the cells that changed."""
        width, height = frame.width, frame.height
        if self.buffer is None:
            self.buffer = DoubleBuffer(self.term, width, height)
            self._write(self.term.home + self.term.clear)
        elif (width, height) != (self.buffer.width, self.buffer.height):
            self.buffer.resize(width, height)
            self._write(self.term.home + self.term.clear)

        self.buffer.clear_back()
        for span in frame.spans:
            self.buffer.put_string(span.x, span.y, span.text,
                                   span.style.fg, span.style.bold)

        output = self.buffer.present()
        if output:
            self._write(output)

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def poll_event(self, timeout: Optional[float]) -> Optional[KeyEvent]:
        """Wait up to ``timeout`` seconds for a key; None blocks."""
        try:
            key = self.term.inkey(timeout=timeout)
        except _TERMINAL_ERRORS as exc:
            raise BackendError(f'terminal read failed: {exc}') from exc
        return decode_keystroke(key)

    def read_event(self) -> KeyEvent:
        """Block until a key arrives."""
        event = None
        while event is None:
            event = self.poll_event(None)
        return event
