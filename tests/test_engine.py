# Backend tests: double-buffer diffing against a real blessed Terminal
# writing to a string buffer, and mode switching against a fake terminal
# that records which blessed contexts were entered and exited.

import io
from contextlib import contextmanager

import pytest
from blessed import Terminal
from blessed.keyboard import Keystroke

from tally.app import AppState
from tally.config import YELLOW
from tally.engine import BlessedBackend, DoubleBuffer
from tally.events import KeyCode
from tally.exceptions import BackendError
from tally.view import render_frame


@pytest.fixture
def term():
    return Terminal(kind="xterm-256color", stream=io.StringIO(), force_styling=True)


# ---------------------------------------------------------------------------
# DoubleBuffer
# ---------------------------------------------------------------------------


def test_present_writes_only_changed_cells(term):
    buf = DoubleBuffer(term, 10, 3)
    buf.put_string(2, 1, "hi", YELLOW)
    first = buf.present()
    assert "h" in first and "i" in first

    buf.clear_back()
    buf.put_string(2, 1, "hi", YELLOW)
    assert buf.present() == ""


def test_present_clears_removed_cells(term):
    buf = DoubleBuffer(term, 10, 3)
    buf.put_string(0, 0, "x")
    buf.present()
    buf.clear_back()
    out = buf.present()
    assert out.endswith(term.normal)
    assert " " in out


def test_put_ignores_off_screen(term):
    buf = DoubleBuffer(term, 4, 2)
    buf.put_string(2, 0, "abcdef")
    buf.put(-1, 0, "z")
    buf.put(0, 5, "z")
    assert [c.char for c in buf.back[0]] == [" ", " ", "a", "b"]


def test_resize_reallocates(term):
    buf = DoubleBuffer(term, 4, 2)
    buf.resize(6, 3)
    assert len(buf.back) == 3 and len(buf.back[0]) == 6
    assert len(buf.front) == 3


# ---------------------------------------------------------------------------
# BlessedBackend
# ---------------------------------------------------------------------------


class FakeTerminal:
    """Just enough of blessed.Terminal for mode switching and input."""

    home = "<home>"
    clear = "<clear>"
    normal = "<normal>"

    def __init__(self, is_a_tty=True, keys=(), fail_raw=False, keyboard=True):
        self.is_a_tty = is_a_tty
        self._keyboard_fd = 0 if keyboard else None
        self.stream = io.StringIO()
        self.log = []
        self.keys = list(keys)
        self.fail_raw = fail_raw
        self.width, self.height = 40, 5

    def _context(name, fail_attr=None):
        @contextmanager
        def ctx(self):
            if fail_attr and getattr(self, fail_attr):
                raise OSError("Inappropriate ioctl for device")
            self.log.append("+" + name)
            try:
                yield
            finally:
                self.log.append("-" + name)
        return ctx

    fullscreen = _context("fullscreen")
    raw = _context("raw", "fail_raw")
    cbreak = _context("cbreak")
    hidden_cursor = _context("hidden_cursor")
    del _context

    def inkey(self, timeout=None):
        self.log.append(("inkey", timeout))
        return self.keys.pop(0) if self.keys else Keystroke("")


def test_enter_and_restore_unwind_in_reverse():
    fake = FakeTerminal()
    backend = BlessedBackend(fake)
    backend.enter_interactive_mode()
    assert backend.interactive
    assert fake.log == ["+fullscreen", "+raw", "+hidden_cursor"]

    backend.restore_normal_mode()
    assert not backend.interactive
    assert fake.log[3:] == ["-hidden_cursor", "-raw", "-fullscreen"]
    assert fake.stream.getvalue().endswith("<normal>")


def test_cbreak_input_mode():
    fake = FakeTerminal()
    BlessedBackend(fake, input_mode="cbreak").enter_interactive_mode()
    assert "+cbreak" in fake.log and "+raw" not in fake.log


def test_restore_is_repeatable():
    fake = FakeTerminal()
    backend = BlessedBackend(fake)
    backend.restore_normal_mode()
    backend.enter_interactive_mode()
    backend.restore_normal_mode()
    backend.restore_normal_mode()
    assert fake.log.count("-raw") == 1


def test_enter_requires_a_tty():
    fake = FakeTerminal(is_a_tty=False)
    with pytest.raises(BackendError, match="not a terminal"):
        BlessedBackend(fake).enter_interactive_mode()
    assert fake.log == []


def test_failed_enter_unwinds_partial_modes():
    fake = FakeTerminal(fail_raw=True)
    backend = BlessedBackend(fake)
    with pytest.raises(BackendError, match="cannot enter interactive mode"):
        backend.enter_interactive_mode()
    assert fake.log == ["+fullscreen", "-fullscreen"]
    assert not backend.interactive


def test_draw_frame_clears_then_diffs(term):
    backend = BlessedBackend(term)
    frame = render_frame(AppState(1), 30, 4)
    backend.draw_frame(frame)
    first = term.stream.getvalue()
    assert first.startswith(term.home + term.clear)
    assert "1" in first and "┏" in first

    backend.draw_frame(frame)
    assert term.stream.getvalue() == first


def test_draw_frame_resizes_buffer(term):
    backend = BlessedBackend(term)
    backend.draw_frame(render_frame(AppState(), 30, 4))
    backend.draw_frame(render_frame(AppState(), 40, 6))
    assert (backend.buffer.width, backend.buffer.height) == (40, 6)


def test_poll_event_decodes():
    fake = FakeTerminal(keys=[Keystroke("\x1b[C", code=261, name="KEY_RIGHT")])
    backend = BlessedBackend(fake)
    assert backend.poll_event(0.016).code is KeyCode.RIGHT
    assert backend.poll_event(0.016) is None
    assert ("inkey", 0.016) in fake.log


def test_read_event_waits_for_a_key():
    fake = FakeTerminal(keys=[Keystroke(""), Keystroke("q")])
    event = BlessedBackend(fake).read_event()
    assert event.char == "q"
    assert fake.log == [("inkey", None), ("inkey", None)]


def test_enter_requires_a_keyboard():
    """With stdin redirected, inkey() never blocks, so refuse to start."""
    fake = FakeTerminal(keyboard=False)
    with pytest.raises(BackendError, match="input is not a terminal"):
        BlessedBackend(fake).enter_interactive_mode()
    assert fake.log == []


def test_restore_on_closed_stream_raises_backend_error(term):
    backend = BlessedBackend(term)
    term.stream.close()
    with pytest.raises(BackendError, match="cannot restore terminal"):
        backend.restore_normal_mode()
