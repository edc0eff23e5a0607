"""
Input Events
=============
Decoded keyboard events and the translation from blessed keystrokes.
"""

import enum
from dataclasses import dataclass
from typing import Optional


class KeyCode(enum.Enum):
    CHAR = 'char'
    LEFT = 'left'
    RIGHT = 'right'
    UP = 'up'
    DOWN = 'down'
    ENTER = 'enter'
    ESCAPE = 'escape'
    OTHER = 'other'


class KeyEventKind(enum.Enum):
    PRESS = 'press'
    REPEAT = 'repeat'
    RELEASE = 'release'


# blessed key name -> KeyCode
_SEQUENCE_CODES = {
    'KEY_LEFT': KeyCode.LEFT,
    'KEY_RIGHT': KeyCode.RIGHT,
    'KEY_UP': KeyCode.UP,
    'KEY_DOWN': KeyCode.DOWN,
    'KEY_ENTER': KeyCode.ENTER,
    'KEY_ESCAPE': KeyCode.ESCAPE,
}


@dataclass(frozen=True)
class KeyEvent:
    """A single decoded key event."""
    code: KeyCode
    char: str = ''
    kind: KeyEventKind = KeyEventKind.PRESS
    name: Optional[str] = None  # blessed key name for sequences

    @classmethod
    def from_char(cls, char: str,
                  kind: KeyEventKind = KeyEventKind.PRESS) -> 'KeyEvent':
        return cls(KeyCode.CHAR, char, kind)

    @classmethod
    def from_code(cls, code: KeyCode,
                  kind: KeyEventKind = KeyEventKind.PRESS) -> 'KeyEvent':
        return cls(code, '', kind, 'KEY_' + code.name)

    @property
    def is_press(self) -> bool:
        return self.kind is KeyEventKind.PRESS

    def __str__(self) -> str:
        label = repr(self.char) if self.code is KeyCode.CHAR else (self.name or self.code.value)
        return f'KeyEvent({label}, {self.kind.value})'


def _keystroke_kind(key) -> KeyEventKind:
    # Only terminals speaking the kitty keyboard protocol report these.
    if getattr(key, 'released', False):
        return KeyEventKind.RELEASE
    if getattr(key, 'repeated', False):
        return KeyEventKind.REPEAT
    return KeyEventKind.PRESS


def decode_keystroke(key) -> Optional[KeyEvent]:
    """
    Translate a blessed Keystroke into a KeyEvent.

    An empty keystroke (inkey timed out) decodes to None.
    """
    if key is None or not key:
        return None

    kind = _keystroke_kind(key)
    if key.is_sequence:
        code = _SEQUENCE_CODES.get(key.name, KeyCode.OTHER)
        return KeyEvent(code, '', kind, key.name)

    char = str(key)
    if char in ('\r', '\n'):
        return KeyEvent(KeyCode.ENTER, '', kind, 'KEY_ENTER')
    if char == '\x1b':
        return KeyEvent(KeyCode.ESCAPE, '', kind, 'KEY_ESCAPE')
    return KeyEvent(KeyCode.CHAR, char, kind)
