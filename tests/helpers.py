"""
Builders shared by the test modules.
"""

import subprocess
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Iterable, Tuple
from unittest.mock import Mock


def make_rss(items: Iterable[Tuple[str, str, datetime]]) -> bytes:
    """Build an RSS 2.0 document from (title, link, published) tuples."""
    entries = []
    for title, link, published in items:
        entries.append(
            f"<item><title>{title}</title><link>{link}</link>"
            f"<pubDate>{format_datetime(published)}</pubDate>"
            f"<guid isPermaLink=\"false\">{link}</guid></item>"
        )
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        '<rss version="2.0"><channel><title>Arch Linux: Recent news updates</title>'
        '<link>https://archlinux.org/news/</link><description>news</description>'
        + "".join(entries) +
        '</channel></rss>'
    ).encode('utf-8')


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def mock_response(status_code=200, content=b'', headers=None, reason='OK'):
    """Build a stand-in for requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.content = content
    response.headers = headers or {}
    response.reason = reason
    return response


def completed(args, returncode=0, stdout=''):
    """Build a CompletedProcess for mocked pacman queries."""
    return subprocess.CompletedProcess(args=args, returncode=returncode, stdout=stdout)
