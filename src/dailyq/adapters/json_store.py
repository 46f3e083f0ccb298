"""Key-value storage adapters - JSON file and in-memory."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the underlying storage cannot be read or written."""

    pass


class JsonFileStore:
    """
    JSON-file key-value store.

    Implements KeyValueStore protocol. The whole namespace lives in one JSON
    object on disk. Every write replaces the file through a temp file.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Failed to read {self.path}: top level is not an object")
        return data

    def _dump(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def get(self, key: str) -> Any | None:
        """Read a value. Returns None if the key is absent."""
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        """Write/overwrite a value."""
        data = self._load()
        data[key] = value
        self._dump(data)

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)

    def keys(self) -> list[str]:
        """List all stored keys."""
        return sorted(self._load())

    def clear(self) -> None:
        """Remove every key."""
        if self.path.exists():
            try:
                self.path.unlink()
            except OSError as e:
                raise StorageError(f"Failed to remove {self.path}: {e}") from e
        logger.info(f"Cleared store at {self.path}")


class MemoryStore:
    """
    In-memory key-value store.

    Implements KeyValueStore protocol. Values are JSON round-tripped so
    callers never share mutable state with the store.
    """

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key!r} is not serializable: {e}") from e

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)

    def clear(self) -> None:
        self._data.clear()
