"""Durable key-value storage for persisted settings.

A single JSON object on disk maps string keys to string values, so each
settings record is one flat entry. Writes replace the file atomically.
"""

import asyncio
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class SettingsStore:
    """JSON-file backed key-value store with async accessors."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._write_lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {self.path} is not a JSON object")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Each write gets its own temp file in the target directory
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = f.name
            try:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            except BaseException:
                f.close()
                os.unlink(tmp_path)
                raise
        try:
            os.replace(tmp_path, self.path)
        except OSError:
            os.unlink(tmp_path)
            raise

    def _set(self, key: str, value: str) -> None:
        # Read-modify-write of the shared file runs one writer at a time
        with self._write_lock:
            try:
                data = self._read_all()
            except ValueError:
                logger.warning(f"Replacing unreadable settings file {self.path}")
                data = {}
            data[key] = value
            self._write_all(data)

    async def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent.

        Raises:
            OSError: the file cannot be read
            ValueError: the file is not valid JSON
        """
        data = await asyncio.to_thread(self._read_all)
        value = data.get(key)
        return value if value is None else str(value)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)
        logger.debug(f"Stored {key} in {self.path}")

