"""Named-slot durable storage on the local machine"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from ..core.errors import PersistenceCorrupt

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    Key/value slots persisted as one file per key.

    Mirrors the browser localStorage contract: string values in, string
    values out, nothing is interpreted here.
    """

    def __init__(self, directory: str):
        self.directory = Path(directory).expanduser()

    def _slot_path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        """
        Get a slot's raw value, or None if never written.

        Raises:
            PersistenceCorrupt: if the slot holds bytes that are not UTF-8
        """
        path = self._slot_path(key)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return f.read()
        except UnicodeDecodeError as e:
            raise PersistenceCorrupt(f"Slot '{key}' is not valid UTF-8") from e

    def set_item(self, key: str, value: str) -> None:
        """Write a slot atomically: readers see the old or the new value, never a mix"""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._slot_path(key)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug(f"Stored slot '{key}' at {path}")

    def remove_item(self, key: str) -> None:
        """Delete a slot if present"""
        path = self._slot_path(key)
        if path.exists():
            path.unlink()
            logger.debug(f"Removed slot '{key}'")
