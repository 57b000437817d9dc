"""
Output formatting utilities for the CLI.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import sys
from typing import Optional, TextIO

from colorama import init, Fore, Style

# Initialize colorama for cross-platform color support
init(autoreset=True)


class OutputFormatter:
    """Handles output formatting for the CLI."""

    def __init__(self, use_color: bool = True, stream: Optional[TextIO] = None):
        """
        Initialize output formatter.

        Args:
            use_color: Whether to use ANSI colors
            stream: Output stream, defaults to the current sys.stdout
        """
        self.use_color = use_color
        self._stream = stream

        # Color shortcuts
        self.green = Fore.GREEN if use_color else ''
        self.red = Fore.RED if use_color else ''
        self.cyan = Fore.CYAN if use_color else ''
        self.reset = Style.RESET_ALL if use_color else ''
        self.bright = Style.BRIGHT if use_color else ''

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def line(self, message: str = "") -> None:
        """Print a plain line."""
        print(message, file=self.stream)

    def header(self, message: str) -> None:
        """Print a section header preceded by a blank line."""
        print(f"\n{self.cyan}{self.bright}{message}{self.reset}", file=self.stream)

    def error(self, message: str) -> None:
        """Print error message."""
        print(f"{self.red}{message}{self.reset}", file=sys.stderr)

    def diff(self, text: str) -> None:
        """Print a unified diff, colouring added and removed lines."""
        for line in text.rstrip("\n").split("\n"):
            if line.startswith(('+++', '---')):
                print(f"{self.bright}{line}{self.reset}", file=self.stream)
            elif line.startswith('@@'):
                print(f"{self.cyan}{line}{self.reset}", file=self.stream)
            elif line.startswith('+'):
                print(f"{self.green}{line}{self.reset}", file=self.stream)
            elif line.startswith('-'):
                print(f"{self.red}{line}{self.reset}", file=self.stream)
            else:
                print(line, file=self.stream)
