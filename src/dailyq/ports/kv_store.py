"""Key-value storage interface."""

from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Interface for a flat, string-keyed store of JSON-compatible values."""

    def get(self, key: str) -> Any | None:
        """Read a value. Returns None if the key is absent."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Write/overwrite a value."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        ...

    def keys(self) -> list[str]:
        """List all stored keys."""
        ...

    def clear(self) -> None:
        """Remove every key."""
        ...
