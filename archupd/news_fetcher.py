"""
Arch Linux news feed polling.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlparse

import feedparser
import requests
from feedparser.exceptions import CharacterEncodingOverride

from .constants import APP_USER_AGENT, NEWS_TIME_FORMAT
from .exceptions import FeedParsingError, NetworkError
from .models import AppConfig, FeedItem, PollState
from .state import StateStore
from .utils.logger import get_logger
from .utils.thread_manager import ResultChannel, start_background_task

logger = get_logger(__name__)

NO_NEWS = "No Arch Linux news."
EMPTY_FEED = "No Arch Linux news (empty feed)."
NEWS_HEADER = "Arch Linux news:"


class NewsPoller:
    """Conditionally fetches the news feed and reports items not seen before."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        state_store: Optional[StateStore] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the poller.

        Args:
            config: Application configuration
            state_store: Where the cache validator and watermark live
            session: HTTP session, created if not given
        """
        self.config = config or AppConfig()
        self.url = self.config.news_url
        self.timeout = self.config.request_timeout
        self.state_store = state_store or StateStore(self.config.state_file)
        self.session = session or self._create_session()

        logger.debug(f"Initialized NewsPoller for {self.url}")

    @staticmethod
    def _create_session() -> requests.Session:
        session = requests.Session()
        session.headers.update({
            'User-Agent': APP_USER_AGENT,
            'Accept': 'application/rss+xml, application/xml, text/xml',
        })
        return session

    def start(self) -> ResultChannel:
        """
        Poll in a background thread.

        Returns:
            Channel carrying the result lines; closed when the poll is done
        """
        channel = ResultChannel(self.config.news_queue_size)
        start_background_task("news-poller", self.poll, channel)
        return channel

    def poll(self, channel: ResultChannel) -> None:
        """Run one poll, sending each result line, then close the channel."""
        try:
            self.check_news(deliver=channel.send_all)
        finally:
            channel.close()

    def check_news(self, deliver: Optional[Callable[[List[str]], None]] = None) -> List[str]:
        """
        Run one poll and return its human-readable result lines.

        Once a 200 response has been received the state is persisted, even
        when the body then fails to parse. The new cache validator is
        therefore kept, and an unchanged malformed feed is not refetched.

        Args:
            deliver: Called with the result lines before the state is saved.
                A poll whose lines never reach the user leaves the stored
                watermark untouched, so the same items are announced again.
        """
        state = self.state_store.load()
        lines, received = self._fetch_news(state)

        if deliver is not None:
            deliver(lines)
        if received:
            self.state_store.save(state)
        return lines

    def _fetch_news(self, state: PollState) -> Tuple[List[str], bool]:
        """
        Fetch and filter the feed, updating state in place.

        Returns:
            Result lines, and whether a full response was received
        """
        try:
            response = self._request(state)
        except NetworkError as e:
            logger.warning(f"News request failed: {e}")
            return [f"Arch Linux news: failed to send request: {e}"], False

        if response.status_code == requests.codes.not_modified:
            logger.debug("News feed not modified")
            return [NO_NEWS], False

        if response.status_code != requests.codes.ok:
            return [f"Arch Linux news: unexpected HTTP status: {response.status_code} {response.reason}"], False

        last_modified = response.headers.get('Last-Modified')
        if last_modified:
            state.last_modified = last_modified

        try:
            items = self.parse_feed(response.content)
        except FeedParsingError as e:
            logger.warning(f"News feed parse failed: {e}")
            return [f"Arch Linux news: failed to decode feed: {e}"], True

        return self.announce(items, state), True

    def _validate_url(self) -> None:
        parsed = urlparse(self.url)
        if parsed.scheme not in ('http', 'https'):
            raise NetworkError(f"Invalid URL scheme: {parsed.scheme!r}")
        if not parsed.hostname:
            raise NetworkError("URL missing hostname")

    def _request(self, state: PollState) -> requests.Response:
        """
        Issue the conditional GET.

        Raises:
            NetworkError: On an invalid URL or any transport failure
        """
        self._validate_url()

        headers = {}
        if state.last_modified:
            headers['If-Modified-Since'] = state.last_modified

        try:
            logger.debug(f"Fetching {self.url} (conditional: {bool(headers)})")
            return self.session.get(self.url, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise NetworkError(f"request timed out after {self.timeout}s: {e}")
        except requests.exceptions.RequestException as e:
            raise NetworkError(str(e))

    def parse_feed(self, content: bytes) -> List[FeedItem]:
        """
        Parse an RSS document into feed items, newest first.

        Raises:
            FeedParsingError: If the document or any item date is malformed
        """
        try:
            feed = feedparser.parse(content)
        except Exception as e:
            raise FeedParsingError(f"XML parsing failed: {e}", feed_url=self.url)

        if getattr(feed, "bozo", False):
            bozo_exc = getattr(feed, "bozo_exception", None)
            if not isinstance(bozo_exc, CharacterEncodingOverride):
                raise FeedParsingError(
                    f"{bozo_exc if bozo_exc else 'Unknown error'}", feed_url=self.url
                )

        if not getattr(feed, "version", ""):
            raise FeedParsingError("Not a syndication feed", feed_url=self.url)

        items = []
        for entry in feed.entries:
            published_parsed = entry.get("published_parsed")
            if not published_parsed:
                raise FeedParsingError(
                    f"Invalid publication date {entry.get('published')!r} "
                    f"for item {entry.get('title', '')!r}",
                    feed_url=self.url
                )
            items.append(FeedItem(
                title=entry.get("title", ""),
                link=entry.get("link", ""),
                published=datetime(*published_parsed[:6], tzinfo=timezone.utc),
                guid=entry.get("id", ""),
            ))

        logger.debug(f"Feed parsed successfully: {len(items)} entries found")
        items.sort(key=lambda item: item.published, reverse=True)
        return items

    @staticmethod
    def format_item(item: FeedItem) -> str:
        """Format an item for display in local time."""
        timestamp = item.published.astimezone().strftime(NEWS_TIME_FORMAT)
        return f"  - {timestamp}: {item.title} ({item.link})"

    def announce(self, items: List[FeedItem], state: PollState) -> List[str]:
        """
        Select items newer than the watermark and advance it.

        Args:
            items: Feed items sorted newest first
            state: Poller state, updated in place

        Returns:
            Result lines
        """
        if not items:
            return [EMPTY_FEED]

        lines = []
        for item in items:
            if item.published > state.latest_seen:
                if not lines:
                    lines.append(NEWS_HEADER)
                lines.append(self.format_item(item))

        # Advance even when nothing was new, never move backwards
        state.latest_seen = max(state.latest_seen, items[0].published)

        if not lines:
            return [NO_NEWS]
        return lines
