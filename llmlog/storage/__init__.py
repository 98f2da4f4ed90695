"""Persistence backends."""

from __future__ import annotations

from typing import Optional

from ..config import Settings, settings as default_settings
from .base import KeyValueStore
from .file import FileKeyValueStore
from .memory import MemoryKeyValueStore


def create_store(config: Optional[Settings] = None) -> KeyValueStore:
    """Build the backend selected by *config* (defaults to global settings)."""

    config = config or default_settings
    if config.backend == "memory":
        return MemoryKeyValueStore()
    if config.backend == "file":
        return FileKeyValueStore(config.data_root)
    raise ValueError(f"Unknown storage backend: {config.backend}")


__all__ = ["KeyValueStore", "FileKeyValueStore", "MemoryKeyValueStore", "create_store"]
