"""
Custom exceptions for archupd.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from typing import List, Optional


class ArchUpdError(Exception):
    """Base exception for all archupd errors."""

    pass


class NetworkError(ArchUpdError):
    """Raised when network operations fail."""

    pass


class FeedParsingError(ArchUpdError):
    """Raised when there's an error parsing the news feed."""

    def __init__(self, message: str, feed_url: str = "") -> None:
        """Initialize the error."""
        super().__init__(message)
        self.feed_url = feed_url

    def __str__(self) -> str:
        return str(self.args[0])


class PackageManagerError(ArchUpdError):
    """Raised when a pacman invocation fails or cannot be started."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        exit_code: Optional[int] = None,
    ) -> None:
        """Initialize the error."""
        super().__init__(message)
        self.command = list(command or [])
        self.exit_code = exit_code

    def __str__(self) -> str:
        if self.exit_code is not None:
            return f"{self.args[0]} (exit status {self.exit_code})"
        return str(self.args[0])


class LogMonitorError(ArchUpdError):
    """Raised when the pacman log cannot be opened or read."""

    pass


class ConfigurationError(ArchUpdError):
    """Raised when configuration is invalid."""

    pass


class StateError(ArchUpdError):
    """Raised when the persisted poller state cannot be decoded."""

    pass
