"""
View
=====
Pure projection of the application state into a drawable frame.

The frame is a bordered block with a centered title, the counter value,
an optional status line and the key instructions along the bottom edge.
Nothing here touches the terminal; the engine draws the result.
"""

from dataclasses import dataclass
from typing import List, Tuple

from .app import AppState
from .config import BLUE, DEFAULT_COLOR, RED, TITLE, YELLOW


# Thick border glyphs
BORDER_TOP_LEFT = '┏'
BORDER_TOP_RIGHT = '┓'
BORDER_BOTTOM_LEFT = '┗'
BORDER_BOTTOM_RIGHT = '┛'
BORDER_HORIZONTAL = '━'
BORDER_VERTICAL = '┃'


@dataclass(frozen=True)
class Style:
    fg: int = DEFAULT_COLOR
    bold: bool = False


PLAIN = Style()
TITLE_STYLE = Style(bold=True)
KEY_STYLE = Style(fg=BLUE, bold=True)
VALUE_STYLE = Style(fg=YELLOW)
STATUS_STYLE = Style(fg=RED, bold=True)

INSTRUCTIONS: Tuple[Tuple[str, Style], ...] = (
    (' Decrement ', PLAIN),
    ('<Left>', KEY_STYLE),
    (' Increment ', PLAIN),
    ('<Right>', KEY_STYLE),
    (' Quit ', PLAIN),
    ('<Q> ', KEY_STYLE),
)


@dataclass(frozen=True)
class Span:
    """A run of text at a fixed cell position."""
    x: int
    y: int
    text: str
    style: Style = PLAIN


@dataclass(frozen=True)
class Frame:
    """One fully rendered screen: its size and the spans drawn on it."""
    width: int
    height: int
    spans: Tuple[Span, ...]

    def lines(self) -> List[str]:
        """Rasterize to plain text rows (styles dropped, spans clipped)."""
        grid = [[' '] * self.width for _ in range(self.height)]
        for span in self.spans:
            if not 0 <= span.y < self.height:
                continue
            for i, char in enumerate(span.text):
                x = span.x + i
                if 0 <= x < self.width:
                    grid[span.y][x] = char
        return [''.join(row) for row in grid]


def _centered(y: int, inner_x: int, inner_width: int,
              parts: Tuple[Tuple[str, Style], ...]) -> List[Span]:
    """Lay out styled parts as one line centered in the inner width."""
    spans = []
    total = sum(len(text) for text, _ in parts)
    x = inner_x + max(0, (inner_width - total) // 2)
    limit = inner_x + inner_width
    for text, style in parts:
        room = limit - x
        if room <= 0:
            break
        text = text[:room]
        spans.append(Span(x, y, text, style))
        x += len(text)
    return spans


def _border(width: int, height: int) -> List[Span]:
    spans = []
    inner = BORDER_HORIZONTAL * (width - 2)
    spans.append(Span(0, 0, BORDER_TOP_LEFT + inner + BORDER_TOP_RIGHT))
    for y in range(1, height - 1):
        spans.append(Span(0, y, BORDER_VERTICAL))
        spans.append(Span(width - 1, y, BORDER_VERTICAL))
    spans.append(Span(0, height - 1, BORDER_BOTTOM_LEFT + inner + BORDER_BOTTOM_RIGHT))
    return spans


def render_frame(state: AppState, width: int, height: int) -> Frame:
    """Build the frame for ``state`` on a ``width`` x ``height`` screen."""
    if width < 2 or height < 2:
        return Frame(max(width, 0), max(height, 0), ())

    inner_width = width - 2
    spans = _border(width, height)

    # Title and instructions sit on the top and bottom border rows
    spans += _centered(0, 1, inner_width, ((TITLE, TITLE_STYLE),))
    spans += _centered(height - 1, 1, inner_width, INSTRUCTIONS)

    # Body rows
    if height > 2:
        spans += _centered(1, 1, inner_width, (
            ('Value: ', PLAIN),
            (str(state.counter), VALUE_STYLE),
        ))
    if height > 3 and state.status:
        spans += _centered(2, 1, inner_width, ((state.status, STATUS_STYLE),))

    return Frame(width, height, tuple(spans))
