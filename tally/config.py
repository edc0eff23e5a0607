"""
Configuration
==============
Fixed application constants plus runtime settings read from the
environment.

Environment:
    TALLY_POLL_MS       Input wait bound in milliseconds (default 16)
    TALLY_BLOCKING      1/true/yes/on to wait for input without a bound
    TALLY_INPUT_MODE    raw (default) or cbreak
    TALLY_LOG_FILE      Write logs to this file (default: no logging)
    TALLY_LOG_LEVEL     DEBUG, INFO, WARNING, ERROR (default INFO)
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .events import KeyCode
from .exceptions import ConfigError


# =============================================================================
# CONSTANTS
# =============================================================================

TARGET_FPS = 60
POLL_TIMEOUT_MS = 1000 // TARGET_FPS  # one frame

COUNTER_MIN = 0
COUNTER_MAX = 2

TITLE = ' Counter App Tutorial '

# ANSI palette indices (-1 = terminal default)
DEFAULT_COLOR = -1
BLACK = 0
RED = 1
GREEN = 2
YELLOW = 3
BLUE = 4
MAGENTA = 5
CYAN = 6
WHITE = 7

# Key bindings
QUIT_CHARS = ('q', 'Q', '\x03')  # Ctrl-C arrives as a key in raw mode
QUIT_CODES = (KeyCode.ESCAPE,)
INCREMENT_CODES = (KeyCode.RIGHT,)
DECREMENT_CODES = (KeyCode.LEFT,)

INPUT_MODES = ('raw', 'cbreak')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off', ''}


# =============================================================================
# SETTINGS
# =============================================================================

@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings."""
    poll_timeout_ms: int = POLL_TIMEOUT_MS
    blocking: bool = False
    input_mode: str = 'raw'
    log_file: Optional[str] = None
    log_level: str = 'INFO'

    @property
    def poll_timeout(self) -> Optional[float]:
        """Input wait bound in seconds, or None for the blocking variant."""
        if self.blocking:
            return None
        return self.poll_timeout_ms / 1000.0


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f'{name}: expected a boolean, got {raw!r}')


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigError(f'{name}: expected an integer, got {raw!r}') from None
    if value < 0:
        raise ConfigError(f'{name}: must not be negative, got {value}')
    return value


def _choice(env: Mapping[str, str], name: str, default: str, choices,
            upper: bool = False) -> str:
    raw = env.get(name)
    if raw is None:
        return default
    normalized = raw.strip().upper() if upper else raw.strip().lower()
    if normalized not in choices:
        raise ConfigError(
            f'{name}: expected one of {", ".join(choices)}, got {raw!r}'
        )
    return normalized


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from environment variables."""
    env = os.environ if environ is None else environ
    log_file = env.get('TALLY_LOG_FILE', '').strip() or None
    return Settings(
        poll_timeout_ms=_int(env, 'TALLY_POLL_MS', POLL_TIMEOUT_MS),
        blocking=_flag(env, 'TALLY_BLOCKING', False),
        input_mode=_choice(env, 'TALLY_INPUT_MODE', 'raw', INPUT_MODES),
        log_file=log_file,
        log_level=_choice(env, 'TALLY_LOG_LEVEL', 'INFO', LOG_LEVELS, upper=True),
    )
