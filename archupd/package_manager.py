"""
Removal of packages no longer required by anything.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from .cli.output import OutputFormatter
from .constants import PACMAN_QUERY_EMPTY_EXIT_CODE
from .exceptions import PackageManagerError
from .models import OrphanQueryResult, OrphanStatus
from .utils.logger import get_logger
from .utils.pacman_runner import PacmanRunner

logger = get_logger(__name__)


class PackageManager:
    """Finds and removes orphaned packages."""

    def __init__(
        self,
        runner: Optional[PacmanRunner] = None,
        output: Optional[OutputFormatter] = None,
    ) -> None:
        """
        Initialize the package manager.

        Args:
            runner: pacman runner
            output: Where user-facing messages go
        """
        self.runner = runner or PacmanRunner()
        self.output = output or OutputFormatter()

    def list_orphans(self) -> OrphanQueryResult:
        """
        Query packages installed as dependencies that nothing requires.

        pacman -Qqtd exits 1 when there is nothing to list, which is
        reported as EMPTY rather than as an error.
        """
        try:
            result = self.runner.query("-Qqtd", privileged=True)
        except PackageManagerError as e:
            return OrphanQueryResult.error(str(e))

        if result.returncode == PACMAN_QUERY_EMPTY_EXIT_CODE:
            logger.debug("No orphaned packages")
            return OrphanQueryResult.empty()

        if result.returncode != 0:
            return OrphanQueryResult.error(
                f"{' '.join(result.args)} failed (exit status {result.returncode})"
            )

        packages = [line.strip() for line in (result.stdout or "").splitlines() if line.strip()]
        logger.debug(f"Found {len(packages)} orphaned packages")
        return OrphanQueryResult.found(packages)

    def remove_orphans(self) -> OrphanQueryResult:
        """
        Offer interactive removal of orphaned packages.

        Returns:
            The query result that drove the removal

        Raises:
            PackageManagerError: If the query or the removal fails
        """
        orphans = self.list_orphans()

        if orphans.status == OrphanStatus.ERROR:
            raise PackageManagerError(orphans.detail)

        if not orphans.has_orphans:
            self.output.header("No superfluous packages.")
            return orphans

        self.output.header("Superfluous packages can be removed:")
        self.runner.remove(orphans.packages)
        return orphans
