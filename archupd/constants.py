"""
Application constants for archupd.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import os
from pathlib import Path

# Application info
APP_NAME = "archupd"
APP_VERSION = "1.0.0"
APP_USER_AGENT = f"{APP_NAME}/{APP_VERSION}"

# File permissions (octal)
STATE_DIR_PERMISSIONS = 0o755   # rwxr-xr-x
STATE_FILE_PERMISSIONS = 0o644  # rw-r--r--

# External resources
NEWSFEED_URL = "https://archlinux.org/feeds/news/"
PACMAN_LOG_PATH = "/var/log/pacman.log"
PACMAN_LOG_ALPM_MARKER = " [ALPM] "

# Commands
PACMAN_COMMAND = "pacman"
PRIVILEGE_COMMAND = "sudo"
PRIVILEGE_COMMANDS = {"sudo", "doas", "pkexec"}

# pacman -Qqtd exits with this code when there is nothing to list
PACMAN_QUERY_EMPTY_EXIT_CODE = 1

# Changelog header emitted by pacman -Qc
CHANGELOG_PACKAGE_PATTERN = r'^Changelog for (.+):$'

# Valid package name characters
PACKAGE_NAME_PATTERN = r'^[a-zA-Z0-9@_+][a-zA-Z0-9@._+-]*$'

# News poller
NEWS_QUEUE_SIZE = 10
FEED_FETCH_TIMEOUT = 30
NEWS_TIME_FORMAT = "%Y-%m-%d %H:%M"

# Limits
MAX_CONFIG_FILE_SIZE = 1024 * 1024  # 1MB
MAX_STATE_FILE_SIZE = 64 * 1024     # 64KB

# Process exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

HELP_TEXT = """
  Arch Linux updater. Run without args and it will:

  - Run "sudo pacman -Sc" to clean up old packages.
  - Run "sudo pacman -Syu" to update outdated packages.
  - Show relevant pacman logfile contents, which includes the old and new version of each package.
  - Show any new package changelog entries.
  - Offer to remove packages that have become unrequired.
  - Display any new official Arch Linux news from RSS feed.
"""


# Paths
def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_state_dir() -> Path:
    """Get the state directory path."""
    state_home = os.environ.get("XDG_STATE_HOME")
    if state_home:
        return Path(state_home)
    return Path.home() / ".local" / "state"


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return get_config_dir() / "config.json"


def get_default_state_path() -> Path:
    """Get the default news poller state file path."""
    return get_state_dir() / f"{APP_NAME}.json"
