"""
Utils package for archupd.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from .logger import get_logger, configure_logging
from .log_monitor import LogMonitor
from .pacman_runner import PacmanRunner
from .subprocess_wrapper import SecureSubprocess
from .thread_manager import ResultChannel, start_background_task

__all__ = [
    "get_logger",
    "configure_logging",
    "LogMonitor",
    "PacmanRunner",
    "SecureSubprocess",
    "ResultChannel",
    "start_background_task",
]
