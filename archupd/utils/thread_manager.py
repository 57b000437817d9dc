"""
Background task helpers: a closable result channel and thread startup.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import queue
import threading
from typing import Any, Callable, Iterable, Iterator

from ..constants import NEWS_QUEUE_SIZE
from .logger import get_logger

logger = get_logger(__name__)

_CLOSED = object()


class ChannelClosedError(Exception):
    """Raised when putting into a closed channel."""
    pass


class ResultChannel:
    """
    One-way, bounded channel of text lines closed by its producer.

    The producer calls put() or send_all() and finally close(). The consumer
    iterates the channel, which blocks until items arrive and ends once the
    channel is closed and drained.
    """

    def __init__(self, maxsize: int = NEWS_QUEUE_SIZE) -> None:
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def put(self, line: str) -> None:
        """Send a line; blocks while the channel is full."""
        if self._closed.is_set():
            raise ChannelClosedError("put on closed channel")
        self._queue.put(line)

    def send_all(self, lines: Iterable[str]) -> None:
        """Send lines and block until the consumer has taken every one."""
        for line in lines:
            self.put(line)
        self._queue.join()

    def close(self) -> None:
        """Signal end of output. Closing twice is a no-op."""
        if self._closed.is_set():
            return
        self._closed.set()
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[str]:
        while True:
            item = self._queue.get()
            try:
                if item is _CLOSED:
                    return
                yield item
            finally:
                # An item counts as taken once the consumer asks for the next
                self._queue.task_done()


def start_background_task(name: str, target: Callable[..., Any], *args: Any) -> threading.Thread:
    """
    Run target(*args) on a daemon thread.

    Daemon threads are abandoned when the main thread exits, so a fatal
    error on the main path never waits for the task.
    """
    def wrapped_target() -> None:
        try:
            target(*args)
        except Exception as e:
            logger.error(f"Background task {name} failed: {e}")
        finally:
            logger.debug(f"Background task {name} finished")

    thread = threading.Thread(target=wrapped_target, name=name, daemon=True)
    thread.start()
    logger.debug(f"Started background task {name}")
    return thread
