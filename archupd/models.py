"""
Data models for archupd.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
from enum import Enum

from .constants import (
    NEWSFEED_URL, PACMAN_LOG_PATH, PACMAN_LOG_ALPM_MARKER,
    PACMAN_COMMAND, PRIVILEGE_COMMAND, NEWS_QUEUE_SIZE, FEED_FETCH_TIMEOUT,
    get_default_state_path
)

# Watermark meaning "never seen any item"
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


class OrphanStatus(Enum):
    """Outcome of the unrequired-package query."""
    EMPTY = "empty"
    FOUND = "found"
    ERROR = "error"


class UpdaterState(Enum):
    """States of a single update run."""
    START = "start"
    CLEANING = "cleaning"
    SNAPSHOT_PRE = "snapshot_pre"
    WATCH_OPEN = "watch_open"
    UPGRADING = "upgrading"
    TAIL_READ = "tail_read"
    SNAPSHOT_POST = "snapshot_post"
    DIFF = "diff"
    REMOVE_ORPHANS = "remove_orphans"
    DRAIN_NEWS = "drain_news"
    DONE = "done"


@dataclass(frozen=True)
class FeedItem:
    """Represents a news item from the Arch Linux feed."""
    title: str
    link: str
    published: datetime
    guid: str = ""


def _parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid timestamp: {value!r}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class PollState:
    """Persisted news poller state."""
    last_modified: str = ""
    latest_seen: datetime = ZERO_TIME

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "last_modified": self.last_modified,
            "latest_seen": self.latest_seen.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PollState':
        """
        Create from dictionary.

        Raises:
            ValueError: If a field has the wrong type or the timestamp is invalid
        """
        if not isinstance(data, dict):
            raise ValueError("State must be a JSON object")

        last_modified = data.get("last_modified", "")
        if not isinstance(last_modified, str):
            raise ValueError("last_modified must be a string")

        latest_seen = ZERO_TIME
        if data.get("latest_seen"):
            latest_seen = _parse_timestamp(data["latest_seen"])

        return cls(last_modified=last_modified, latest_seen=latest_seen)


@dataclass
class OrphanQueryResult:
    """Result of querying packages no longer required by anything."""
    status: OrphanStatus
    packages: List[str] = field(default_factory=list)
    detail: str = ""

    @classmethod
    def empty(cls) -> 'OrphanQueryResult':
        return cls(status=OrphanStatus.EMPTY)

    @classmethod
    def found(cls, packages: List[str]) -> 'OrphanQueryResult':
        return cls(status=OrphanStatus.FOUND, packages=list(packages))

    @classmethod
    def error(cls, detail: str) -> 'OrphanQueryResult':
        return cls(status=OrphanStatus.ERROR, detail=detail)

    @property
    def has_orphans(self) -> bool:
        """Check if there is anything to remove."""
        return self.status == OrphanStatus.FOUND and len(self.packages) > 0


@dataclass
class AppConfig:
    """Application configuration."""
    news_url: str = NEWSFEED_URL
    pacman_log_path: str = PACMAN_LOG_PATH
    state_file: str = field(default_factory=lambda: str(get_default_state_path()))
    privilege_command: str = PRIVILEGE_COMMAND
    pacman_command: str = PACMAN_COMMAND
    alpm_marker: str = PACMAN_LOG_ALPM_MARKER
    news_queue_size: int = NEWS_QUEUE_SIZE
    request_timeout: int = FEED_FETCH_TIMEOUT
    color: bool = True
    debug_mode: bool = False
    log_file: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "news_url": self.news_url,
            "pacman_log_path": self.pacman_log_path,
            "state_file": self.state_file,
            "privilege_command": self.privilege_command,
            "pacman_command": self.pacman_command,
            "alpm_marker": self.alpm_marker,
            "news_queue_size": self.news_queue_size,
            "request_timeout": self.request_timeout,
            "color": self.color,
            "debug_mode": self.debug_mode,
            "log_file": self.log_file,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppConfig':
        """Create from dictionary."""
        defaults = cls()
        return cls(
            news_url=data.get("news_url", defaults.news_url),
            pacman_log_path=data.get("pacman_log_path", defaults.pacman_log_path),
            state_file=data.get("state_file", defaults.state_file),
            privilege_command=data.get("privilege_command", defaults.privilege_command),
            pacman_command=data.get("pacman_command", defaults.pacman_command),
            alpm_marker=data.get("alpm_marker", defaults.alpm_marker),
            news_queue_size=data.get("news_queue_size", defaults.news_queue_size),
            request_timeout=data.get("request_timeout", defaults.request_timeout),
            color=data.get("color", defaults.color),
            debug_mode=data.get("debug_mode", defaults.debug_mode),
            log_file=data.get("log_file", defaults.log_file),
        )
