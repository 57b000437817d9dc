"""
Tail monitoring for the pacman log file.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import os
from typing import BinaryIO, Iterator, Optional

from ..exceptions import LogMonitorError
from .logger import get_logger

logger = get_logger(__name__)


class LogMonitor:
    """
    Reads only what was appended to a file after the monitor was opened.

    The file is opened and positioned at its end on creation. Later reads
    return the bytes written since then, up to the moment of the read. This
    is not a live ``tail -f``: reads never wait for further writes.

    Usage::

        with LogMonitor.open("/var/log/pacman.log") as monitor:
            run_upgrade()
            for line in monitor.lines():
                ...
    """

    def __init__(self, handle: BinaryIO, path: str) -> None:
        self._handle: Optional[BinaryIO] = handle
        self.path = path
        self.start_offset = handle.tell()

    @classmethod
    def open(cls, path: str) -> 'LogMonitor':
        """
        Open a file and seek to its end.

        Raises:
            LogMonitorError: If the file cannot be opened
        """
        try:
            handle = open(path, 'rb')
        except OSError as e:
            raise LogMonitorError(f"Cannot open log file {path}: {e}")

        try:
            handle.seek(0, os.SEEK_END)
        except OSError as e:
            handle.close()
            raise LogMonitorError(f"Cannot seek in log file {path}: {e}")

        monitor = cls(handle, path)
        logger.debug(f"Monitoring {path} from offset {monitor.start_offset}")
        return monitor

    @property
    def closed(self) -> bool:
        return self._handle is None

    def _require_handle(self) -> BinaryIO:
        if self._handle is None:
            raise LogMonitorError(f"Log monitor for {self.path} is closed")
        return self._handle

    def read_appended(self) -> bytes:
        """
        Read everything appended since the last read (or since open).

        Raises:
            LogMonitorError: If reading fails or the monitor is closed
        """
        handle = self._require_handle()
        try:
            data = handle.read()
        except OSError as e:
            raise LogMonitorError(f"Cannot read log file {self.path}: {e}")
        logger.debug(f"Read {len(data)} appended bytes from {self.path}")
        return data

    def lines(self) -> Iterator[bytes]:
        """
        Lazily yield appended lines without their trailing newline.

        Raises:
            LogMonitorError: If reading fails or the monitor is closed
        """
        handle = self._require_handle()
        while True:
            try:
                line = handle.readline()
            except OSError as e:
                raise LogMonitorError(f"Cannot read log file {self.path}: {e}")
            if not line:
                return
            yield line.rstrip(b'\n')

    def close(self) -> None:
        """Release the file handle."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> 'LogMonitor':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
