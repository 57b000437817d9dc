"""
Secure subprocess wrapper to prevent command injection and handle errors properly.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import os
import re
import subprocess
from typing import Any, Dict, List, Optional

from ..constants import PACKAGE_NAME_PATTERN, PRIVILEGE_COMMANDS
from .logger import get_logger

logger = get_logger(__name__)


class SecureSubprocess:
    """Validated wrapper around subprocess for the few commands archupd needs."""

    # Commands that may be executed at all
    ALLOWED_COMMANDS = {'pacman'}

    # Commands that are allowed to run with privilege escalation
    PRIVILEGE_ALLOWED = {'pacman'}

    _package_name_re = re.compile(PACKAGE_NAME_PATTERN)

    @classmethod
    def validate_command(cls, cmd: List[str]) -> bool:
        """
        Validate that a command is safe to execute.

        Args:
            cmd: Command as list of arguments

        Returns:
            True if command is valid

        Raises:
            ValueError: If command is invalid
        """
        if not cmd:
            raise ValueError("Empty command")

        actual_cmd = os.path.basename(cmd[0])
        if actual_cmd in PRIVILEGE_COMMANDS:
            if len(cmd) < 2:
                raise ValueError(f"Nothing to run under {actual_cmd}")
            actual_cmd = os.path.basename(cmd[1])
            if actual_cmd not in cls.PRIVILEGE_ALLOWED:
                raise ValueError(f"Command '{actual_cmd}' not allowed with {cmd[0]}")

        if actual_cmd not in cls.ALLOWED_COMMANDS:
            raise ValueError(f"Command '{actual_cmd}' not in allowed list")

        if any('\x00' in arg for arg in cmd):
            raise ValueError("Command contains NUL byte")

        return True

    @classmethod
    def sanitize_package_name(cls, name: str) -> str:
        """
        Sanitize a package name to prevent injection.

        Args:
            name: Package name to sanitize

        Returns:
            Sanitized package name

        Raises:
            ValueError: If package name is invalid
        """
        if not cls._package_name_re.match(name):
            raise ValueError(f"Invalid package name: {name}")

        if len(name) > 255:
            raise ValueError(f"Package name too long: {name}")

        return name

    @staticmethod
    def _c_locale_env(env: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        # Force English output for consistent parsing
        env = dict(env if env is not None else os.environ)
        env['LC_ALL'] = 'C'
        env['LC_TIME'] = 'C'
        return env

    @classmethod
    def run(
        cls,
        cmd: List[str],
        capture_output: bool = False,
        text: bool = True,
        force_c_locale: bool = False,
        **kwargs: Any
    ) -> subprocess.CompletedProcess:
        """
        Run a command after validation.

        With capture_output=False the child inherits the terminal, so it may
        prompt the user.

        Args:
            cmd: Command to run
            capture_output: Capture stdout; stderr always goes to the terminal
            text: Whether to decode output as text
            force_c_locale: Run with LC_ALL=C
            **kwargs: Additional arguments for subprocess.run

        Returns:
            CompletedProcess instance

        Raises:
            ValueError: If the command fails validation
            OSError: If the command cannot be started
        """
        cmd = list(cmd)
        cls.validate_command(cmd)

        # Never use shell=True
        kwargs.pop('shell', None)
        if force_c_locale:
            kwargs['env'] = cls._c_locale_env(kwargs.get('env'))

        logger.debug(f"Running command: {' '.join(cmd)}")

        stdout = subprocess.PIPE if capture_output else None
        result = subprocess.run(cmd, stdout=stdout, text=text, check=False, **kwargs)

        if result.returncode != 0:
            logger.debug(f"Command returned non-zero: {result.returncode}")

        return result

    @classmethod
    def popen(cls, cmd: List[str], force_c_locale: bool = True, **kwargs: Any) -> subprocess.Popen:
        """
        Start a command with its stdout piped as raw bytes.

        Raises:
            ValueError: If the command fails validation
            OSError: If the command cannot be started
        """
        cmd = list(cmd)
        cls.validate_command(cmd)
        kwargs.pop('shell', None)
        if force_c_locale:
            kwargs['env'] = cls._c_locale_env(kwargs.get('env'))

        logger.debug(f"Starting command: {' '.join(cmd)}")
        return subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            **kwargs
        )
