"""
Shared utility for running pacman commands.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import subprocess
from typing import List

from ..constants import PACMAN_COMMAND, PRIVILEGE_COMMAND
from ..exceptions import PackageManagerError
from .logger import get_logger
from .subprocess_wrapper import SecureSubprocess

logger = get_logger(__name__)


class PacmanRunner:
    """Handles execution of pacman commands."""

    def __init__(self, pacman: str = PACMAN_COMMAND, privilege: str = PRIVILEGE_COMMAND) -> None:
        """
        Initialize the runner.

        Args:
            pacman: pacman executable
            privilege: Privilege escalation wrapper (sudo, doas, pkexec)
        """
        self.pacman = pacman
        self.privilege = privilege

    def build_command(self, args: List[str], privileged: bool = True) -> List[str]:
        """Build the argv for a pacman invocation."""
        cmd = [self.pacman] + list(args)
        if privileged:
            cmd.insert(0, self.privilege)
        return cmd

    def run(self, *args: str) -> None:
        """
        Run a privileged pacman command attached to the terminal.

        Raises:
            PackageManagerError: If pacman cannot be started or exits non-zero
        """
        cmd = self.build_command(list(args))
        logger.info(f"Running {' '.join(cmd)}")
        try:
            result = SecureSubprocess.run(cmd, capture_output=False)
        except (OSError, ValueError) as e:
            raise PackageManagerError(f"Failed to run {' '.join(cmd)}: {e}", command=cmd)

        if result.returncode != 0:
            raise PackageManagerError(
                f"{' '.join(cmd)} failed",
                command=cmd,
                exit_code=result.returncode
            )

    def query(self, *args: str, privileged: bool = False) -> subprocess.CompletedProcess:
        """
        Run a read-only pacman query, capturing stdout.

        The exit status is left for the caller to interpret.

        Raises:
            PackageManagerError: If pacman cannot be started
        """
        cmd = self.build_command(list(args), privileged=privileged)
        try:
            return SecureSubprocess.run(cmd, capture_output=True, force_c_locale=True)
        except (OSError, ValueError) as e:
            raise PackageManagerError(f"Failed to run {' '.join(cmd)}: {e}", command=cmd)

    def stream(self, *args: str, privileged: bool = False) -> subprocess.Popen:
        """
        Start a pacman query whose stdout is read line by line.

        Raises:
            PackageManagerError: If pacman cannot be started
        """
        cmd = self.build_command(list(args), privileged=privileged)
        try:
            return SecureSubprocess.popen(cmd)
        except (OSError, ValueError) as e:
            raise PackageManagerError(f"Failed to run {' '.join(cmd)}: {e}", command=cmd)

    def clean_cache(self) -> None:
        """Remove old packages from the cache."""
        self.run("-Sc", "--noconfirm")

    def upgrade(self) -> None:
        """Sync databases and upgrade the system."""
        self.run("-Syu", "--noconfirm")

    def remove(self, packages: List[str]) -> None:
        """Interactively remove packages and their unneeded dependencies."""
        for pkg in packages:
            try:
                SecureSubprocess.sanitize_package_name(pkg)
            except ValueError as e:
                raise PackageManagerError(str(e))
        self.run("-Rs", *packages)
