"""
Tests for orphaned package listing and removal.
"""

import io
from unittest.mock import Mock

import pytest

from archupd.cli.output import OutputFormatter
from archupd.exceptions import PackageManagerError
from archupd.models import OrphanStatus
from archupd.package_manager import PackageManager
from archupd.utils.pacman_runner import PacmanRunner

from helpers import completed

QUERY = ["sudo", "pacman", "-Qqtd"]


@pytest.fixture
def runner():
    return Mock(spec=PacmanRunner)


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def manager(runner, stream):
    return PackageManager(runner, OutputFormatter(use_color=False, stream=stream))


class TestListOrphans:
    """Test exit-code disambiguation of the orphan query."""

    def test_exit_one_means_no_orphans(self, manager, runner):
        runner.query.return_value = completed(QUERY, returncode=1)

        result = manager.list_orphans()

        runner.query.assert_called_once_with("-Qqtd", privileged=True)
        assert result.status == OrphanStatus.EMPTY
        assert result.packages == []

    def test_exit_zero_lists_packages(self, manager, runner):
        runner.query.return_value = completed(QUERY, stdout="foo\nbar\n")

        result = manager.list_orphans()

        assert result.status == OrphanStatus.FOUND
        assert result.packages == ["foo", "bar"]
        assert result.has_orphans

    @pytest.mark.parametrize("code", [2, 127, -9])
    def test_other_exit_codes_are_errors(self, manager, runner, code):
        runner.query.return_value = completed(QUERY, returncode=code)

        result = manager.list_orphans()

        assert result.status == OrphanStatus.ERROR
        assert f"exit status {code}" in result.detail

    def test_start_failure_is_an_error(self, manager, runner):
        runner.query.side_effect = PackageManagerError("Failed to run sudo pacman -Qqtd")

        result = manager.list_orphans()

        assert result.status == OrphanStatus.ERROR
        assert "Failed to run" in result.detail


class TestRemoveOrphans:
    """Test the interactive removal step."""

    def test_nothing_to_remove(self, manager, runner, stream):
        runner.query.return_value = completed(QUERY, returncode=1)

        manager.remove_orphans()

        runner.remove.assert_not_called()
        assert "No superfluous packages." in stream.getvalue()

    def test_zero_exit_with_empty_output(self, manager, runner, stream):
        runner.query.return_value = completed(QUERY, stdout="")

        manager.remove_orphans()

        runner.remove.assert_not_called()
        assert "No superfluous packages." in stream.getvalue()

    def test_removes_all_orphans(self, manager, runner, stream):
        runner.query.return_value = completed(QUERY, stdout="foo\nbar\n")

        manager.remove_orphans()

        runner.remove.assert_called_once_with(["foo", "bar"])
        assert "Superfluous packages can be removed:" in stream.getvalue()

    def test_query_error_raises(self, manager, runner):
        runner.query.return_value = completed(QUERY, returncode=2)

        with pytest.raises(PackageManagerError):
            manager.remove_orphans()

    def test_removal_failure_propagates(self, manager, runner):
        runner.query.return_value = completed(QUERY, stdout="foo\n")
        runner.remove.side_effect = PackageManagerError("sudo pacman -Rs foo failed", exit_code=1)

        with pytest.raises(PackageManagerError):
            manager.remove_orphans()
