"""
Pytest configuration and shared fixtures.
"""

import pytest

from archupd.models import AppConfig


@pytest.fixture(autouse=True)
def isolated_xdg_dirs(tmp_path, monkeypatch):
    """Keep tests away from the real user config and state directories."""
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / 'config'))
    monkeypatch.setenv('XDG_STATE_HOME', str(tmp_path / 'state'))
    monkeypatch.setenv('HOME', str(tmp_path / 'home'))


@pytest.fixture
def app_config(tmp_path):
    """Configuration pointing every path at the test directory."""
    log_path = tmp_path / 'pacman.log'
    log_path.write_bytes(b'[2024-01-01T00:00:00+0000] [PACMAN] Running pacman -Syu\n')
    return AppConfig(
        news_url='https://archlinux.org/feeds/news/',
        pacman_log_path=str(log_path),
        state_file=str(tmp_path / 'state' / 'archupd.json'),
        color=False,
    )
