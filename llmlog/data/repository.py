"""Persistence of the record collection on top of a key-value blob."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..config import settings
from ..storage import KeyValueStore
from .models import Record, RecordDraft, new_id, utcnow

logger = logging.getLogger(__name__)


RecordInput = Union[RecordDraft, Record, Mapping[str, Any]]


class RecordRepository:
    """CRUD access to the full record collection.

    Every operation reads the whole collection, changes it in memory and
    writes the whole collection back. Nothing is cached between calls, and
    there is no locking: with two writers the last write wins.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._store = store
        self.key = key or settings.records_key
        self._clock = clock or utcnow
        self._new_id = id_factory or new_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_all(self) -> List[Record]:
        """Return every record, newest ``createdAt`` first."""

        records = self._read_records()
        return sorted(records, key=lambda record: record.created_at, reverse=True)

    def get(self, record_id: str) -> Optional[Record]:
        """Return the record with *record_id*, or None."""

        for record in self.get_all():
            if record.id == record_id:
                return record
        return None

    def count(self) -> int:
        return len(self._read_records())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def save(self, data: RecordInput) -> Record:
        """Create or update a record and persist the whole collection.

        A draft whose ``id`` matches a stored record overwrites the fields it
        carries and refreshes ``updatedAt``; ``createdAt`` never changes.
        A draft without ``id``, or with an ``id`` that is not stored, becomes
        a new record with a freshly generated id.
        """

        draft = self._coerce_draft(data)
        records = self.get_all()
        now = self._clock()
        fields = draft.present_fields()

        index = self._index_of(records, draft.id) if draft.id else None
        if index is not None:
            current = records[index]
            saved = current.model_copy(update={**fields, "updated_at": max(now, current.created_at)})
            records[index] = saved
            logger.debug("Updated record %s (%s)", saved.id, ", ".join(sorted(fields)) or "no fields")
        else:
            if draft.id:
                logger.warning("Record %s not found; saving as a new record", draft.id)
            saved = Record(
                id=self._new_id(),
                title=fields.get("title", ""),
                model=fields.get("model", ""),
                tags=fields.get("tags", []),
                content=fields.get("content", ""),
                comments=fields.get("comments", []),
                created_at=now,
                updated_at=now,
            )
            records.insert(0, saved)
            logger.debug("Created record %s", saved.id)

        self._write_records(records)
        return saved

    def delete(self, record_id: str) -> bool:
        """Remove *record_id* from the collection.

        Returns:
            True if a record was removed. Unknown ids are not an error.
        """

        records = self.get_all()
        remaining = [record for record in records if record.id != record_id]
        self._write_records(remaining)
        removed = len(remaining) != len(records)
        if removed:
            logger.info("Deleted record %s", record_id)
        return removed

    def replace_all(self, records: Iterable[Record]) -> None:
        """Overwrite the stored collection with *records* verbatim."""

        self._write_records(list(records))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _read_records(self) -> List[Record]:
        raw = self._store.get(self.key)
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
        except ValueError as exc:
            logger.error("Failed to parse records blob %r: %s", self.key, exc)
            return []
        if not isinstance(entries, list):
            logger.error("Failed to parse records blob %r: expected a list", self.key)
            return []

        records = []
        for index, entry in enumerate(entries):
            try:
                records.append(Record.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Dropping unreadable record %d in %r: %s", index, self.key, exc)
        return records

    def _write_records(self, records: List[Record]) -> None:
        payload = [record.to_json_dict() for record in records]
        self._store.set(self.key, json.dumps(payload, ensure_ascii=False).encode("utf-8"))

    @staticmethod
    def _coerce_draft(data: RecordInput) -> RecordDraft:
        if isinstance(data, RecordDraft):
            return data
        if isinstance(data, Record):
            return RecordDraft.model_validate(data.model_dump())
        return RecordDraft.model_validate(dict(data))

    @staticmethod
    def _index_of(records: List[Record], record_id: str) -> Optional[int]:
        for index, record in enumerate(records):
            if record.id == record_id:
                return index
        return None
