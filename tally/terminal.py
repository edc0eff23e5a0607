"""
Terminal Session
=================
Owns the switch into interactive mode and back.

``restore()`` is reachable from every exit path: the ``with`` block on
the graceful path, and the fault hooks for crashes. It can be called any
number of times, before or after ``enter()``, and never raises.
"""

import logging

from .exceptions import BackendError

logger = logging.getLogger(__name__)


class TerminalSession:
    """Enter/restore guard around a backend's interactive mode."""

    def __init__(self, backend):
        self.backend = backend
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def enter(self) -> None:
        """Switch to alternate screen + raw input. Raises BackendError."""
        if self._active:
            raise BackendError('terminal session already active')
        self.backend.enter_interactive_mode()
        self._active = True
        logger.info('terminal session entered')

    def restore(self) -> bool:
        """
        Return the terminal to normal mode.

        Returns False if the backend failed to restore; the failure is
        logged rather than raised so fault handlers can always continue
        to their diagnostics.
        """
        was_active, self._active = self._active, False
        try:
            self.backend.restore_normal_mode()
        except BackendError:
            logger.exception('terminal restore failed')
            return False
        if was_active:
            logger.info('terminal session restored')
        return True

    def __enter__(self) -> 'TerminalSession':
        self.enter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.restore()
        return False
