"""
Logging
========
Log setup. The terminal belongs to the UI while a session is active,
so records only ever go to a file, never to the console.
"""

import logging
from pathlib import Path

from .config import Settings
from .exceptions import ConfigError

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'

_ROOT_LOGGER = 'tally'


def _open_log_file(log_file: str) -> logging.Handler:
    # Opened now, not on first record: a bad path must fail before the
    # terminal is taken over
    path = Path(log_file)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode='a', encoding='utf-8')
    except OSError as exc:
        raise ConfigError(f'TALLY_LOG_FILE: cannot open {path}: {exc}') from exc
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Attach a file handler (or a null handler) to the package logger.

    Raises ConfigError when the log file cannot be opened; the logger is
    left untouched in that case.
    """
    if settings.log_file:
        handler = _open_log_file(settings.log_file)
    else:
        handler = logging.NullHandler()

    logger = logging.getLogger(_ROOT_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    logger.propagate = False
    logger.addHandler(handler)
    return logger
