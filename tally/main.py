#!/usr/bin/env python3
"""
TALLY - Terminal Counter
=========================
A bounded counter in your terminal.

Controls:
    LEFT    - Decrement
    RIGHT   - Increment
    Q/ESC   - Quit
"""

import logging
import sys
from typing import Optional, TextIO

from blessed import Terminal

from .app import App
from .config import Settings, load_settings
from .engine import BlessedBackend
from .exceptions import (
    CounterError, EventHandlingError, HookInstallError, TallyError,
)
from .hooks import format_error, install_hooks, report_error, uninstall_hooks
from .logs import configure_logging
from .terminal import TerminalSession
from .view import render_frame

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


# =============================================================================
# EVENT LOOP
# =============================================================================

def handle_events(app: App, backend, timeout: Optional[float]) -> None:
    """
    Wait for one input event and apply it to ``app``.

    ``timeout`` None waits without a bound. Only key presses are
    dispatched; repeat and release events are dropped.
    """
    if timeout is None:
        event = backend.read_event()
    else:
        event = backend.poll_event(timeout)

    if event is None or not event.is_press:
        return

    try:
        app.handle_key_event(event)
    except CounterError as exc:
        raise EventHandlingError(
            f'handling key event failed: {event}', event
        ) from exc


def run(app: App, backend, timeout: Optional[float] = None) -> None:
    """
    Draw, wait, dispatch until the app asks to exit.

    Counter errors are shown on the status line and the loop carries
    on. BackendError propagates.
    """
    while not app.exit:
        width, height = backend.size
        backend.draw_frame(render_frame(app.snapshot(), width, height))

        try:
            handle_events(app, backend, timeout)
        except EventHandlingError as exc:
            logger.warning('%s: %s', exc, exc.__cause__)
            app.status = str(exc.__cause__)


# =============================================================================
# SESSION LIFECYCLE
# =============================================================================

def run_app(backend, settings: Settings, app: Optional[App] = None,
            stream: Optional[TextIO] = None) -> int:
    """Install hooks, run one terminal session, and return the exit status."""
    session = TerminalSession(backend)
    app = app if app is not None else App()

    try:
        install_hooks(session, stream=stream)
    except HookInstallError as exc:
        # Nothing entered yet, so nothing to restore
        logger.error('%s', exc)
        print(format_error(exc), file=stream or sys.stderr, flush=True)
        return EXIT_ERROR

    try:
        with session:
            run(app, backend, settings.poll_timeout)
    except TallyError as exc:
        logger.error('session aborted: %s', exc, exc_info=True)
        report_error(exc)
        status = EXIT_ERROR
    except KeyboardInterrupt:
        logger.info('interrupted')
        status = EXIT_INTERRUPTED
    else:
        logger.info('quit at counter=%d', app.counter)
        status = EXIT_OK
    uninstall_hooks()
    return status


def main():
    """Entry point. Sets up logging and the terminal, then runs the app."""
    try:
        settings = load_settings()
        configure_logging(settings)
    except TallyError as exc:
        print(format_error(exc), file=sys.stderr)
        sys.exit(EXIT_ERROR)

    backend = BlessedBackend(Terminal(), input_mode=settings.input_mode)
    sys.exit(run_app(backend, settings))


if __name__ == '__main__':
    main()
