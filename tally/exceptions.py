"""
Exceptions
===========
Error hierarchy for the counter TUI.

Backend and hook failures are fatal. Counter failures are recoverable:
the loop reports them in the status line and keeps running.
"""

from typing import Any, Optional


class TallyError(Exception):
    """Base exception for all tally errors."""


class ConfigError(TallyError):
    """Raised when an environment setting has an invalid value."""


class BackendError(TallyError):
    """Raised when the terminal cannot be reconfigured, drawn to or read."""


class HookInstallError(TallyError):
    """Raised when the fault hooks cannot be registered."""


class CounterError(TallyError):
    """Base for counter validation failures."""


class CounterOverflow(CounterError):
    """Raised when an increment would go past the counter maximum."""

    def __init__(self, message: str = 'counter overflow'):
        super().__init__(message)


class CounterUnderflow(CounterError):
    """Raised when a decrement would go below the counter minimum."""

    def __init__(self, message: str = 'counter underflow'):
        super().__init__(message)


class EventHandlingError(TallyError):
    """
    Wraps a failure raised while dispatching an input event.

    The event that caused the failure is kept on ``event`` and the
    original exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, event: Optional[Any] = None):
        super().__init__(message)
        self.event = event
