"""
Logging configuration for archupd.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path
from typing import Dict, Optional


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'      # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        log_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset_color = self.COLORS['RESET']

        # Work on a copy so file handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{log_color}{record.levelname}{reset_color}"

        return super().format(record)


CONSOLE_FORMAT = '%(levelname)s - %(name)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Global configuration for logging with thread synchronization
_debug_enabled = False
_color_enabled = True
_log_file_path: Optional[str] = None
_logger_instances: Dict[str, logging.Logger] = {}
_global_state_lock = threading.RLock()


def _current_level() -> int:
    # The CLI prints its own results; logging stays quiet unless asked
    return logging.DEBUG if _debug_enabled else logging.WARNING


def _attach_handlers(logger: logging.Logger) -> None:
    """Replace a logger's handlers with the current console/file setup."""
    level = _current_level()
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    # Console handler on stderr, coloured only for a terminal
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    if _color_enabled and sys.stderr.isatty():
        console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if _log_file_path:
        try:
            file_handler = logging.FileHandler(_log_file_path, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            logger.addHandler(file_handler)
            logger.setLevel(logging.DEBUG)
        except OSError:
            # Don't log this error to avoid recursion
            pass

    logger.propagate = False


def configure_logging(debug: bool = False, log_file: Optional[str] = None, color: bool = True) -> None:
    """
    Set global logging options and reconfigure existing loggers.

    Args:
        debug: Emit debug messages on stderr
        log_file: Optional file receiving every message at DEBUG level
        color: Colour level names when stderr is a terminal
    """
    global _debug_enabled, _color_enabled, _log_file_path
    with _global_state_lock:
        _debug_enabled = debug
        _color_enabled = color
        _log_file_path = None
        if log_file:
            try:
                Path(log_file).parent.mkdir(parents=True, exist_ok=True)
                _log_file_path = str(log_file)
            except OSError as e:
                print(f"Cannot create log directory for {log_file}: {e}", file=sys.stderr)

        for logger in _logger_instances.values():
            _attach_handlers(logger)


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger instance with thread safety.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    with _global_state_lock:
        if name in _logger_instances:
            return _logger_instances[name]

        logger = logging.getLogger(name)
        _attach_handlers(logger)
        _logger_instances[name] = logger
        return logger
