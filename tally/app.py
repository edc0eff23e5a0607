"""
Application State
==================
The counter state machine driven by the event loop.

State is ``(counter, exit)``. ``counter`` never leaves
``[COUNTER_MIN, COUNTER_MAX]``: a transition that would push it out of
range raises before anything is committed. ``exit`` only ever goes from
False to True, and once set every further transition is a no-op.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import (
    COUNTER_MAX, COUNTER_MIN,
    DECREMENT_CODES, INCREMENT_CODES, QUIT_CHARS, QUIT_CODES,
)
from .events import KeyCode, KeyEvent
from .exceptions import CounterOverflow, CounterUnderflow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppState:
    """Read-only snapshot handed to the view."""
    counter: int = 0
    exit: bool = False
    status: Optional[str] = None


class App:
    """Mutable application state and its transitions."""

    def __init__(self, counter: int = COUNTER_MIN, exit: bool = False):
        if not COUNTER_MIN <= counter <= COUNTER_MAX:
            raise ValueError(
                f'counter {counter} outside [{COUNTER_MIN}, {COUNTER_MAX}]'
            )
        self._counter = counter
        self._exit = exit
        self.status: Optional[str] = None  # last recoverable error, shown on screen

    @property
    def counter(self) -> int:
        return self._counter

    @property
    def exit(self) -> bool:
        return self._exit

    def snapshot(self) -> AppState:
        return AppState(self._counter, self._exit, self.status)

    def __repr__(self) -> str:
        return f'App(counter={self._counter}, exit={self._exit})'

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def handle_key_event(self, event: KeyEvent) -> None:
        """
        Apply the transition bound to ``event``.

        Raises CounterOverflow / CounterUnderflow when the counter would
        leave its range; the state is unchanged in that case.
        """
        if self._exit:
            return

        if event.code is KeyCode.CHAR:
            if event.char in QUIT_CHARS:
                self.request_exit()
            return

        if event.code in QUIT_CODES:
            self.request_exit()
        elif event.code in DECREMENT_CODES:
            self.decrement_counter()
        elif event.code in INCREMENT_CODES:
            self.increment_counter()

    def request_exit(self) -> None:
        self._exit = True
        logger.debug('exit requested at counter=%d', self._counter)

    def increment_counter(self) -> None:
        if self._counter + 1 > COUNTER_MAX:
            raise CounterOverflow()
        self._counter += 1
        self.status = None

    def decrement_counter(self) -> None:
        if self._counter - 1 < COUNTER_MIN:
            raise CounterUnderflow()
        self._counter -= 1
        self.status = None
