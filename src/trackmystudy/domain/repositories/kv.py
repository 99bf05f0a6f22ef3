"""Key-value store protocol."""

from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """Synchronous string store holding one serialized aggregate per key."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value for ``key`` or None when absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Overwrite the value stored under ``key``."""
        ...

    def delete(self, key: str) -> None:
        """Remove ``key``; a missing key is not an error."""
        ...
