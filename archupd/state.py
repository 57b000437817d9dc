"""
Persistence of the news poller state between runs.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import json
import os
from pathlib import Path
from typing import Optional, Union

from .constants import (
    MAX_STATE_FILE_SIZE, STATE_DIR_PERMISSIONS, STATE_FILE_PERMISSIONS,
    get_default_state_path
)
from .exceptions import StateError
from .models import PollState
from .utils.logger import get_logger

logger = get_logger(__name__)


class StateStore:
    """Loads and saves PollState as a small JSON document."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        """
        Initialize the store.

        Args:
            path: State file path, defaults to $XDG_STATE_HOME/archupd.json
        """
        self.path = Path(path) if path else get_default_state_path()

    def _read(self) -> PollState:
        size = self.path.stat().st_size
        if size > MAX_STATE_FILE_SIZE:
            raise StateError(f"State file too large: {size} bytes")

        with open(self.path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise StateError(f"Invalid JSON in state file {self.path}: {e}")

        try:
            return PollState.from_dict(data)
        except ValueError as e:
            raise StateError(f"Invalid state in {self.path}: {e}")

    def load(self) -> PollState:
        """
        Load the persisted state.

        Never raises: a missing, unreadable or malformed file yields the
        zero-valued state.
        """
        try:
            state = self._read()
            logger.debug(f"Loaded poller state from {self.path}")
            return state
        except FileNotFoundError:
            logger.debug(f"No state file at {self.path}")
        except OSError as e:
            logger.warning(f"Error reading state file {self.path}: {e}")
        except StateError as e:
            logger.warning(str(e))
        return PollState()

    def save(self, state: PollState) -> bool:
        """
        Atomically write the state, creating parent directories.

        Failures are logged, never raised.

        Returns:
            True if the state was written
        """
        temp_file = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True, mode=STATE_DIR_PERMISSIONS)

            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(state.to_dict(), f)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())

            os.chmod(temp_file, STATE_FILE_PERMISSIONS)
            temp_file.replace(self.path)
            logger.debug(f"Saved poller state to {self.path}")
            return True

        except OSError as e:
            logger.warning(f"Error writing state file {self.path}: {e}")
            try:
                temp_file.unlink()
            except OSError:
                pass
            return False
