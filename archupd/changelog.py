"""
Package changelog snapshots and their diffs across an upgrade.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import difflib
import io
import re
from typing import Dict, Iterable, List, NamedTuple, Optional

from .constants import CHANGELOG_PACKAGE_PATTERN
from .exceptions import PackageManagerError
from .utils.logger import get_logger
from .utils.pacman_runner import PacmanRunner

logger = get_logger(__name__)

CHANGELOG_PACKAGE_RE = re.compile(CHANGELOG_PACKAGE_PATTERN)

ChangelogMap = Dict[str, str]


class ChangelogDiff(NamedTuple):
    """Rendered unified diff of one package's changelog."""
    package: str
    text: str


def parse_changelogs(lines: Iterable[str]) -> ChangelogMap:
    """
    Parse ``pacman -Qc`` output into a package -> changelog mapping.

    A ``Changelog for <name>:`` line starts a new package. Every other line
    is appended verbatim with a newline to the current package. Lines seen
    before the first header belong to no package and are dropped.

    Args:
        lines: Output lines, with or without trailing newlines

    Returns:
        Mapping of package name to changelog text
    """
    result: ChangelogMap = {}
    current_pkg: Optional[str] = None
    current_log: List[str] = []

    for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        match = CHANGELOG_PACKAGE_RE.match(line)
        if match:
            if current_pkg is not None:
                result[current_pkg] = "".join(current_log)
            current_pkg = match.group(1)
            current_log = []
        else:
            current_log.append(line + "\n")

    if current_pkg is not None:
        result[current_pkg] = "".join(current_log)

    return result


class ChangelogSnapshotter:
    """Captures the changelogs of all installed packages."""

    def __init__(self, runner: Optional[PacmanRunner] = None) -> None:
        self.runner = runner or PacmanRunner()

    def capture(self) -> ChangelogMap:
        """
        Run ``pacman -Qc`` and parse its output.

        Only a line feed ends a line; a bare carriage return stays part of the
        changelog text.

        Raises:
            PackageManagerError: If pacman cannot be started or exits non-zero
        """
        proc = self.runner.stream("-Qc")
        output = io.TextIOWrapper(proc.stdout, encoding="utf-8", errors="replace", newline="\n")
        try:
            changelogs = parse_changelogs(output)
        finally:
            output.close()
            returncode = proc.wait()

        if returncode != 0:
            raise PackageManagerError(
                "Failed to query package changelogs",
                command=list(proc.args),
                exit_code=returncode
            )

        logger.debug(f"Captured changelogs for {len(changelogs)} packages")
        return changelogs


def _split_lines(text: str) -> List[str]:
    """Split on line feeds only, keeping them."""
    lines = text.split("\n")
    return [line + "\n" for line in lines[:-1]] + ([lines[-1]] if lines[-1] else [])


def diff_changelogs(pre: ChangelogMap, post: ChangelogMap) -> List[ChangelogDiff]:
    """
    Diff changelogs of packages present before and after with changed text.

    Packages only in ``pre`` or only in ``post``, or whose text is unchanged,
    yield nothing.

    Returns:
        Unified diffs ordered by package name
    """
    diffs = []
    for pkg in sorted(post):
        log_post = post[pkg]
        log_pre = pre.get(pkg)
        if log_pre is None or log_pre == log_post:
            continue

        lines = difflib.unified_diff(
            _split_lines(log_pre),
            _split_lines(log_post),
            fromfile=f"{pkg} (before)",
            tofile=f"{pkg} (after)",
        )
        text = "".join(line if line.endswith("\n") else line + "\n" for line in lines)
        diffs.append(ChangelogDiff(pkg, text))

    return diffs
