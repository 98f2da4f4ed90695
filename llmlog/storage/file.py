"""File-backed key-value store: one JSON file per key."""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from .base import KeyValueStore

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileKeyValueStore(KeyValueStore):
    """Stores each key as ``<root>/<key>.json``.

    Writes go to a temporary file in the same directory which is then renamed
    over the target, so the blob on disk is always a complete value.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).expanduser()
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Return the file backing *key*."""

        if not _SAFE_KEY.match(key) or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        try:
            with path.open("rb") as handle:
                return handle.read()
        except FileNotFoundError:
            return None

    def set(self, key: str, value: bytes) -> None:
        target = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.root)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d bytes to %s", len(value), target)
