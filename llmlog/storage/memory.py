"""In-memory key-value store for tests and throwaway sessions."""

from __future__ import annotations

from typing import Dict, Optional

from .base import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store; contents vanish with the process."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._blobs: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._blobs.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._blobs[key] = bytes(value)
