"""
Key-Value Store.

Durable client-side state: one JSON document per key in a directory.
Every persisted concern (credentials, identity, notes, preferences) owns
its own key so each can be cleared independently.

Usage:
    store = KeyValueStore(Path("data"))
    store.set("dark_mode", True)
    store.get("dark_mode", default=False)
    store.remove("dark_mode")
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any

from notu.core.exceptions import StorageError
from notu.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

_VALID_KEY = re.compile(r"^[a-z][a-z0-9_]*$")


class KeyValueStore:
    """JSON file per key, written atomically."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _VALID_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read a value.

        Missing and undecodable documents both return `default`; a corrupt
        document is logged, never raised.
        """
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            log_with_source(
                logger, "storage", "warning", "Unreadable stored value",
                key=key, error=str(e),
            )
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Write a value, replacing the previous document atomically.

        Raises:
            StorageError: If the document cannot be written
        """
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=f".{key}.", suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f, ensure_ascii=False)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            log_with_source(
                logger, "storage", "error", "Failed to write stored value",
                key=key, error=str(e),
            )
            raise StorageError(f"Could not write {key}") from e

    def remove(self, key: str) -> None:
        """Delete a value. Missing keys are ignored."""
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not remove {key}") from e

    def contains(self, key: str) -> bool:
        return self._path(key).exists()
