"""JSON backup and restore of the record collection."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from ..config import settings
from ..data import Record, RecordRepository
from ..data.models import utcnow

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "llm_logs_backup"


def default_backup_name(day: Optional[date] = None) -> str:
    """Return the file name used for an export taken on *day*."""

    day = day or utcnow().date()
    return f"{BACKUP_PREFIX}_{day.isoformat()}.json"


@dataclass(frozen=True)
class ImportResult:
    """Outcome of an import.

    Attributes:
        count: Number of entries in the input array, malformed ones included.
            This is the figure older tooling reports as "imported".
        merged: Entries actually written into the collection.
        skipped: Entries ignored for a missing id/createdAt or invalid shape.
    """

    count: int = 0
    merged: int = 0
    skipped: int = 0


class TransferService:
    """Export to, and merge from, a JSON array of records."""

    def __init__(self, repository: RecordRepository, indent: Optional[int] = None) -> None:
        self._repository = repository
        self._indent = settings.export_indent if indent is None else indent

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export(self) -> str:
        """Serialize every record, newest first, as pretty-printed JSON."""

        payload = [record.to_json_dict() for record in self._repository.get_all()]
        return json.dumps(payload, indent=self._indent, ensure_ascii=False)

    def export_to_file(self, path: Optional[Path] = None) -> Path:
        """Write ``export()`` to *path* (or a dated file in the export dir)."""

        target = Path(path) if path else settings.resolved_export_dir / default_backup_name()
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as handle:
            handle.write(self.export())
        logger.info("Exported records to %s", target)
        return target

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------
    def import_json(self, text: str) -> ImportResult:
        """Merge records from *text* into the collection.

        Incoming entries replace stored records with the same id wholesale.
        Entries without a non-empty ``id`` and a ``createdAt`` are skipped.
        Malformed JSON or a non-array top level imports nothing and writes
        nothing.
        """

        try:
            entries = json.loads(text)
        except (TypeError, ValueError) as exc:
            logger.error("Import failed: %s", exc)
            return ImportResult()
        if not isinstance(entries, list):
            logger.error("Import failed: expected a JSON array, got %s", type(entries).__name__)
            return ImportResult()

        merged: Dict[str, Record] = {record.id: record for record in self._repository.get_all()}
        written = 0
        for position, entry in enumerate(entries):
            if not isinstance(entry, dict) or not entry.get("id") or not entry.get("createdAt"):
                continue
            try:
                record = Record.model_validate(entry)
            except ValidationError as exc:
                logger.warning("Skipping import entry %d (%s): %s", position, entry.get("id"), exc)
                continue
            merged[record.id] = record
            written += 1

        self._repository.replace_all(merged.values())
        result = ImportResult(count=len(entries), merged=written, skipped=len(entries) - written)
        logger.info("Imported %d of %d entries", result.merged, result.count)
        return result

    def import_from_file(self, path: Path) -> ImportResult:
        """Read a backup file and merge it via ``import_json``."""

        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Could not read %s: %s", path, exc)
            return ImportResult()
        return self.import_json(text)
