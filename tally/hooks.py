"""
Fault Hooks
============
Process-wide handlers that put the terminal back to normal before any
fatal diagnostic is printed.

    install_hooks(session)   - once, before session.enter()
    report_error(exc)        - top-level reporter for propagated errors
    uninstall_hooks()        - put the previous handlers back

Covered paths:
    sys.excepthook        uncaught exception in the main thread
    threading.excepthook  uncaught exception in any other thread
    atexit                interpreter shutdown with the session still open
"""

import atexit
import logging
import sys
import threading
from typing import List, Optional, TextIO

from .exceptions import HookInstallError

logger = logging.getLogger(__name__)

_SESSION = None
_STREAM: Optional[TextIO] = None
_PREVIOUS_EXCEPTHOOK = None
_PREVIOUS_THREADING_EXCEPTHOOK = None


def hooks_installed() -> bool:
    return _SESSION is not None


def _restore_terminal():
    if _SESSION is not None:
        _SESSION.restore()


def _excepthook(exc_type, exc, tb):
    _restore_terminal()
    previous = _PREVIOUS_EXCEPTHOOK or sys.__excepthook__
    previous(exc_type, exc, tb)


def _threading_excepthook(args):
    _restore_terminal()
    previous = _PREVIOUS_THREADING_EXCEPTHOOK or threading.__excepthook__
    previous(args)


def install_hooks(session, stream: Optional[TextIO] = None) -> None:
    """
    Register the restore-first fault handlers for ``session``.

    ``stream`` is where report_error() writes (default: sys.stderr at
    report time). Raises HookInstallError if hooks are already installed
    or registration fails.
    """
    global _SESSION, _STREAM, _PREVIOUS_EXCEPTHOOK, _PREVIOUS_THREADING_EXCEPTHOOK

    if _SESSION is not None:
        raise HookInstallError('fault hooks are already installed')

    previous_excepthook = sys.excepthook
    previous_threading_excepthook = threading.excepthook
    try:
        sys.excepthook = _excepthook
        threading.excepthook = _threading_excepthook
        atexit.register(_restore_terminal)
    except (AttributeError, TypeError) as exc:
        sys.excepthook = previous_excepthook
        threading.excepthook = previous_threading_excepthook
        raise HookInstallError(f'cannot register fault hooks: {exc}') from exc

    _SESSION = session
    _STREAM = stream
    _PREVIOUS_EXCEPTHOOK = previous_excepthook
    _PREVIOUS_THREADING_EXCEPTHOOK = previous_threading_excepthook
    logger.debug('fault hooks installed')


def uninstall_hooks() -> None:
    """Reinstate the handlers that were active before install_hooks()."""
    global _SESSION, _STREAM, _PREVIOUS_EXCEPTHOOK, _PREVIOUS_THREADING_EXCEPTHOOK

    if _SESSION is None:
        return
    if sys.excepthook is _excepthook:
        sys.excepthook = _PREVIOUS_EXCEPTHOOK
    if threading.excepthook is _threading_excepthook:
        threading.excepthook = _PREVIOUS_THREADING_EXCEPTHOOK
    atexit.unregister(_restore_terminal)

    _SESSION = None
    _STREAM = None
    _PREVIOUS_EXCEPTHOOK = None
    _PREVIOUS_THREADING_EXCEPTHOOK = None
    logger.debug('fault hooks uninstalled')


def format_error(exc: BaseException) -> str:
    """Render an error and its cause chain."""
    lines: List[str] = [f'Error: {exc}']
    causes = []
    cause = exc.__cause__
    while cause is not None:
        causes.append(cause)
        cause = cause.__cause__
    if causes:
        lines.append('')
        lines.append('Caused by:')
        for i, cause in enumerate(causes):
            prefix = f'   {i}: ' if len(causes) > 1 else '    '
            lines.append(f'{prefix}{cause}')
    return '\n'.join(lines)


def report_error(exc: BaseException) -> None:
    """Restore the terminal, then print ``exc`` with its cause chain."""
    _restore_terminal()
    stream = _STREAM if _STREAM is not None else sys.stderr
    print(format_error(exc), file=stream, flush=True)
