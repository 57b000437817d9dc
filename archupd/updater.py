"""
Full system update run for Arch Linux systems.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from typing import List, Optional

from .changelog import ChangelogMap, ChangelogSnapshotter, diff_changelogs
from .cli.output import OutputFormatter
from .constants import EXIT_FAILURE, EXIT_SUCCESS
from .exceptions import ArchUpdError
from .models import AppConfig, UpdaterState
from .news_fetcher import NewsPoller
from .package_manager import PackageManager
from .utils.log_monitor import LogMonitor
from .utils.logger import get_logger
from .utils.pacman_runner import PacmanRunner
from .utils.thread_manager import ResultChannel

logger = get_logger(__name__)


class Updater:
    """
    Sequences one update run.

    The news poll starts first and runs in the background. The pacman
    steps run strictly one after another on the calling thread. The news
    results are printed last.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        runner: Optional[PacmanRunner] = None,
        poller: Optional[NewsPoller] = None,
        output: Optional[OutputFormatter] = None,
    ) -> None:
        """
        Initialize the updater.

        Args:
            config: Application configuration
            runner: pacman runner
            poller: News poller
            output: Where user-facing messages go
        """
        self.config = config or AppConfig()
        self.runner = runner or PacmanRunner(
            pacman=self.config.pacman_command,
            privilege=self.config.privilege_command
        )
        self.poller = poller or NewsPoller(self.config)
        self.output = output or OutputFormatter(use_color=self.config.color)
        self.snapshotter = ChangelogSnapshotter(self.runner)
        self.package_manager = PackageManager(self.runner, self.output)
        self.state = UpdaterState.START
        self.history: List[UpdaterState] = [UpdaterState.START]

    def _enter(self, state: UpdaterState) -> None:
        logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def run(self) -> int:
        """
        Run the update.

        Returns:
            Process exit code: 0 on success, 1 on the first fatal failure
        """
        news = self.poller.start()

        try:
            self._update()
        except ArchUpdError as e:
            # The news thread is a daemon and is simply abandoned
            logger.debug(f"Aborted in state {self.state.value}: {e}")
            self.output.error(f"Error: {e}")
            return EXIT_FAILURE

        self._enter(UpdaterState.DRAIN_NEWS)
        self.drain_news(news)

        self._enter(UpdaterState.DONE)
        return EXIT_SUCCESS

    def _update(self) -> None:
        """
        Run the pacman steps.

        Raises:
            ArchUpdError: On the first fatal failure
        """
        self._enter(UpdaterState.CLEANING)
        self.runner.clean_cache()

        self._enter(UpdaterState.SNAPSHOT_PRE)
        changelogs_pre = self.snapshotter.capture()

        self._enter(UpdaterState.WATCH_OPEN)
        with LogMonitor.open(self.config.pacman_log_path) as monitor:
            self._enter(UpdaterState.UPGRADING)
            self.runner.upgrade()

            self._enter(UpdaterState.TAIL_READ)
            found_alpm_logs = self.show_alpm_logs(monitor)

        if not found_alpm_logs:
            logger.info("Nothing was changed by the upgrade")
            return

        self._enter(UpdaterState.SNAPSHOT_POST)
        changelogs_post = self.snapshotter.capture()

        self._enter(UpdaterState.DIFF)
        self.show_changelog_diff(changelogs_pre, changelogs_post)

        self._enter(UpdaterState.REMOVE_ORPHANS)
        self.package_manager.remove_orphans()

    def show_alpm_logs(self, monitor: LogMonitor) -> bool:
        """
        Print appended pacman log lines written by ALPM.

        Returns:
            True if any such line was found
        """
        marker = self.config.alpm_marker.encode("utf-8")
        found_any = False
        for line in monitor.lines():
            if marker in line:
                if not found_any:
                    self.output.header("ALPM logs:")
                    found_any = True
                self.output.line(line.decode("utf-8", errors="replace"))
        return found_any

    def show_changelog_diff(self, pre: ChangelogMap, post: ChangelogMap) -> None:
        """Print changelog diffs for upgraded packages."""
        diffs = diff_changelogs(pre, post)
        if not diffs:
            self.output.header("No updated changelogs.")
            return

        self.output.header("Changelog diffs:")
        for changelog_diff in diffs:
            self.output.line()
            self.output.diff(changelog_diff.text)

    def drain_news(self, news: ResultChannel) -> None:
        """Block until the news poll finishes, printing its lines in order."""
        self.output.line()
        for line in news:
            self.output.line(line)
