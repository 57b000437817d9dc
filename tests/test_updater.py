"""
Tests for the update run sequence.
"""

import io
from unittest.mock import Mock

import pytest

from archupd.changelog import ChangelogSnapshotter
from archupd.cli.output import OutputFormatter
from archupd.exceptions import PackageManagerError
from archupd.models import UpdaterState
from archupd.news_fetcher import NewsPoller
from archupd.package_manager import PackageManager
from archupd.updater import Updater
from archupd.utils.pacman_runner import PacmanRunner
from archupd.utils.thread_manager import ResultChannel

ALPM_LINES = (
    b"[2024-03-01T10:00:00+0000] [PACMAN] starting full system upgrade\n"
    b"[2024-03-01T10:00:05+0000] [ALPM] transaction started\n"
    b"[2024-03-01T10:00:06+0000] [ALPM] upgraded foo (1.0-1 -> 1.1-1)\n"
)
NO_CHANGE_LINES = b"[2024-03-01T10:00:00+0000] [PACMAN] starting full system upgrade\n"


def news_channel(*lines):
    channel = ResultChannel()
    for line in lines:
        channel.put(line)
    channel.close()
    return channel


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def runner():
    return Mock(spec=PacmanRunner)


@pytest.fixture
def poller():
    poller = Mock(spec=NewsPoller)
    poller.start.return_value = news_channel("Arch Linux news:", "  - 2024-03-01 10:00: News (https://l/)")
    return poller


@pytest.fixture
def updater(app_config, runner, poller, stream):
    updater = Updater(
        app_config,
        runner=runner,
        poller=poller,
        output=OutputFormatter(use_color=False, stream=stream),
    )
    updater.snapshotter = Mock(spec=ChangelogSnapshotter)
    updater.snapshotter.capture.side_effect = [
        {"foo": "1.0\n", "bar": "same\n"},
        {"foo": "1.1\n1.0\n", "bar": "same\n"},
    ]
    updater.package_manager = Mock(spec=PackageManager)
    return updater


def upgrade_appends(app_config, data):
    def upgrade():
        with open(app_config.pacman_log_path, "ab") as f:
            f.write(data)
    return upgrade


class TestUpdateRun:
    """Test the state sequence of a run."""

    def test_full_run_with_changes(self, updater, app_config, runner, stream):
        runner.upgrade.side_effect = upgrade_appends(app_config, ALPM_LINES)

        assert updater.run() == 0

        runner.clean_cache.assert_called_once()
        runner.upgrade.assert_called_once()
        assert updater.snapshotter.capture.call_count == 2
        updater.package_manager.remove_orphans.assert_called_once()
        assert updater.history == [
            UpdaterState.START,
            UpdaterState.CLEANING,
            UpdaterState.SNAPSHOT_PRE,
            UpdaterState.WATCH_OPEN,
            UpdaterState.UPGRADING,
            UpdaterState.TAIL_READ,
            UpdaterState.SNAPSHOT_POST,
            UpdaterState.DIFF,
            UpdaterState.REMOVE_ORPHANS,
            UpdaterState.DRAIN_NEWS,
            UpdaterState.DONE,
        ]

        output = stream.getvalue()
        assert "ALPM logs:" in output
        assert "[ALPM] upgraded foo (1.0-1 -> 1.1-1)" in output
        assert "[PACMAN] starting full system upgrade" not in output
        # The pre-existing log content is never shown
        assert "Running pacman -Syu" not in output
        assert "Changelog diffs:" in output
        assert "+1.1" in output
        assert "bar (before)" not in output

    def test_no_alpm_lines_skips_post_steps(self, updater, app_config, runner, stream):
        runner.upgrade.side_effect = upgrade_appends(app_config, NO_CHANGE_LINES)

        assert updater.run() == 0

        runner.clean_cache.assert_called_once()
        runner.upgrade.assert_called_once()
        assert updater.snapshotter.capture.call_count == 1
        updater.package_manager.remove_orphans.assert_not_called()
        assert UpdaterState.SNAPSHOT_POST not in updater.history
        assert "ALPM logs:" not in stream.getvalue()

    def test_unchanged_changelogs_are_reported(self, updater, app_config, runner, stream):
        runner.upgrade.side_effect = upgrade_appends(app_config, ALPM_LINES)
        updater.snapshotter.capture.side_effect = [{"foo": "1.0\n"}, {"foo": "1.0\n"}]

        assert updater.run() == 0
        assert "No updated changelogs." in stream.getvalue()

    def test_news_is_printed_last_in_order(self, updater, app_config, runner, stream):
        runner.upgrade.side_effect = upgrade_appends(app_config, ALPM_LINES)

        updater.run()

        output = stream.getvalue()
        header = output.index("Arch Linux news:")
        assert output.index("ALPM logs:") < header
        assert output.index("Changelog diffs:") < header
        assert output.index("  - 2024-03-01 10:00: News (https://l/)") > header

    def test_poller_started_before_pacman(self, updater, runner, poller):
        calls = []
        poller.start.side_effect = lambda: calls.append("news") or news_channel()
        runner.clean_cache.side_effect = lambda: calls.append("clean")

        updater.run()

        assert calls[:2] == ["news", "clean"]


class TestFatalFailures:
    """Test that the first fatal failure stops the run."""

    def test_clean_failure_aborts(self, updater, runner, capsys):
        runner.clean_cache.side_effect = PackageManagerError("sudo pacman -Sc --noconfirm failed", exit_code=1)

        assert updater.run() == 1

        updater.snapshotter.capture.assert_not_called()
        runner.upgrade.assert_not_called()
        assert "Error: sudo pacman -Sc --noconfirm failed (exit status 1)" in capsys.readouterr().err

    def test_snapshot_failure_aborts(self, updater, runner):
        updater.snapshotter.capture.side_effect = PackageManagerError("Failed to query package changelogs")

        assert updater.run() == 1
        runner.upgrade.assert_not_called()

    def test_missing_log_file_aborts_before_upgrade(self, updater, app_config, runner):
        app_config.pacman_log_path = app_config.pacman_log_path + ".missing"

        assert updater.run() == 1
        runner.upgrade.assert_not_called()
        assert updater.state == UpdaterState.WATCH_OPEN

    def test_upgrade_failure_aborts_without_draining_news(self, updater, runner, stream):
        runner.upgrade.side_effect = PackageManagerError("sudo pacman -Syu --noconfirm failed", exit_code=1)

        assert updater.run() == 1

        assert updater.state == UpdaterState.UPGRADING
        assert "Arch Linux news:" not in stream.getvalue()
        updater.package_manager.remove_orphans.assert_not_called()

    def test_orphan_removal_failure_aborts(self, updater, app_config, runner):
        runner.upgrade.side_effect = upgrade_appends(app_config, ALPM_LINES)
        updater.package_manager.remove_orphans.side_effect = PackageManagerError("query failed")

        assert updater.run() == 1
        assert UpdaterState.DRAIN_NEWS not in updater.history
