# Shared fixtures and fakes for the tally pytest suite.
#
# Nothing here needs a real terminal: FakeBackend stands in for the
# blessed backend and records every call in order on a shared log.

import os
import sys

import pytest

# Ensure tally is importable from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tally import hooks  # noqa: E402
from tally.events import KeyCode, KeyEvent  # noqa: E402
from tally.exceptions import BackendError  # noqa: E402

# ---------------------------------------------------------------------------
# Event shorthands
# ---------------------------------------------------------------------------

LEFT = KeyEvent.from_code(KeyCode.LEFT)
RIGHT = KeyEvent.from_code(KeyCode.RIGHT)
QUIT = KeyEvent.from_char("q")


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class RecordingStream:
    """Text stream that appends each write to the shared call log."""

    def __init__(self, log):
        self.log = log

    def write(self, text):
        if text:
            self.log.append(("write", text))
        return len(text)

    def flush(self):
        pass

    @property
    def text(self):
        return "".join(c[1] for c in self.log
                       if isinstance(c, tuple) and c[0] == "write")


class FakeBackend:
    """Scripted backend: hands out queued events, records frames and modes.

    A queued None means "no event before the timeout". Running out of
    events is a test bug, so it fails loudly instead of hanging.
    """

    def __init__(self, events=(), log=None, size=(50, 4), fail_draw_at=None,
                 fail_enter=False, fail_restore=False):
        self.events = list(events)
        self.log = log if log is not None else []
        self.size = size
        self.frames = []
        self.timeouts = []
        self.fail_draw_at = fail_draw_at
        self.fail_enter = fail_enter
        self.fail_restore = fail_restore
        self.interactive = False

    def enter_interactive_mode(self):
        self.log.append("enter")
        if self.fail_enter:
            raise BackendError("not a terminal")
        self.interactive = True

    def restore_normal_mode(self):
        self.log.append("restore")
        if self.fail_restore:
            raise BackendError("tcsetattr failed")
        self.interactive = False

    def draw_frame(self, frame):
        self.log.append("draw")
        if self.fail_draw_at is not None and len(self.frames) == self.fail_draw_at:
            raise BackendError("draw failed")
        self.frames.append(frame)

    def _next(self):
        if not self.events:
            raise AssertionError("FakeBackend ran out of events")
        return self.events.pop(0)

    def poll_event(self, timeout):
        self.log.append("poll")
        self.timeouts.append(timeout)
        return self._next()

    def read_event(self):
        self.log.append("read")
        event = None
        while event is None:
            event = self._next()
        return event


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _uninstall_hooks():
    """Never leak fault hooks from one test into the next."""
    hooks.uninstall_hooks()
    yield
    hooks.uninstall_hooks()


@pytest.fixture
def call_log():
    return []


@pytest.fixture
def stream(call_log):
    return RecordingStream(call_log)
