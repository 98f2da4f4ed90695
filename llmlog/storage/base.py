"""Abstract base class for key-value persistence backends."""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """Abstract interface for a durable local byte store.

    Each ``set`` replaces the whole value for a key; a concurrent reader sees
    either the previous value or the new one, never a mix.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the stored value for *key*.

        Args:
            key: Blob name

        Returns:
            Raw bytes, or None if the key has never been written
        """
        pass

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Replace the value stored under *key*.

        Args:
            key: Blob name
            value: Complete serialized payload
        """
        pass
