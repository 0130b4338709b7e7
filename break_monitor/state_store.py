"""
State Storage Module

Loads and saves the day activity record as a JSON document.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional

from .activity_state import ActivityState
from .errors import StartupError, StateFormatError, StorageError
from .logging_setup import get_logger


class JsonStateStore:
    """Persists a single ActivityState to a JSON file."""

    def __init__(self, path):
        """
        Initialize the store.

        Args:
            path: Location of the state file
        """
        self.path = Path(path)
        self.logger = get_logger(__name__)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[ActivityState]:
        """
        Read the persisted state.

        Returns:
            The stored ActivityState, or None if no file exists yet

        Raises:
            StateFormatError: If the file cannot be read or parsed
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, 'r', encoding='utf-8') as file:
                data = json.load(file)
        except (OSError, ValueError) as e:
            raise StateFormatError(f"Cannot read state file {self.path}: {e}") from e

        return ActivityState.from_dict(data)

    def save(self, state: ActivityState) -> None:
        """
        Write the state, replacing the previous file in one step.

        The document goes to a temporary file beside the target first, so
        an interrupted write leaves the old file intact.

        Raises:
            StorageError: If the directory or file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create directory {self.path.parent}: {e}") from e

        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                'w', encoding='utf-8', dir=self.path.parent,
                prefix=f".{self.path.name}.", suffix=".tmp", delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(state.to_dict(), tmp)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Cannot write state file {self.path}: {e}") from e

    def load_or_create(self, factory: Callable[[], ActivityState]) -> ActivityState:
        """
        Load the state, creating and saving a new one if none exists.

        Args:
            factory: Builds the initial state

        Returns:
            The loaded or newly created ActivityState

        Raises:
            StateFormatError: If an existing file is corrupt
            StartupError: If a new state cannot be written
        """
        state = self.load()
        if state is not None:
            self.logger.info(f"Loaded day activity from {self.path}")
            return state

        state = factory()
        try:
            self.save(state)
        except StorageError as e:
            raise StartupError(str(e)) from e
        self.logger.info(f"Created new day activity at {self.path}")
        return state

    def reset(self, state: ActivityState) -> None:
        """Overwrite whatever is stored with the given state."""
        self.save(state)
        self.logger.info(f"Day activity at {self.path} reset")
