"""Tests for RecordRepository."""

import json
import logging
from datetime import datetime, timezone

from llmlog.data import Record, RecordDraft, RecordRepository
from llmlog.storage import FileKeyValueStore, MemoryKeyValueStore

from .conftest import RECORDS_KEY


class TestRecordRepositoryCreate:
    """Tests for saving new records."""

    def test_create_then_read(self, repository: RecordRepository):
        """A record saved without id can be read back by its new id."""
        saved = repository.save({"title": "A"})

        loaded = repository.get(saved.id)
        assert loaded is not None
        assert loaded.title == "A"
        assert loaded.id
        assert loaded.created_at == loaded.updated_at

    def test_missing_fields_default_to_empty(self, repository: RecordRepository):
        saved = repository.save(RecordDraft())
        assert saved.title == ""
        assert saved.model == ""
        assert saved.content == ""
        assert saved.tags == []
        assert saved.comments == []

    def test_ids_are_unique(self, repository: RecordRepository):
        ids = {repository.save({"title": str(n)}).id for n in range(20)}
        assert len(ids) == 20

    def test_tags_are_trimmed(self, repository: RecordRepository):
        """Whitespace is stripped and empty tags dropped; duplicates survive."""
        saved = repository.save({"tags": [" python ", "", "llm", "llm"]})
        assert saved.tags == ["python", "llm", "llm"]

    def test_newest_first(self, repository: RecordRepository):
        first = repository.save({"title": "first"})
        second = repository.save({"title": "second"})
        assert [r.id for r in repository.get_all()] == [second.id, first.id]

    def test_unknown_id_creates_new_record(self, repository: RecordRepository, caplog):
        """Saving with a stale id falls back to creating a record with a fresh id."""
        repository.save({"title": "existing"})

        with caplog.at_level(logging.WARNING, logger="llmlog.data.repository"):
            saved = repository.save({"id": "does-not-exist", "title": "orphan"})

        assert saved.id != "does-not-exist"
        assert saved.title == "orphan"
        assert saved.created_at == saved.updated_at
        assert repository.count() == 2
        assert repository.get("does-not-exist") is None
        assert "does-not-exist" in caplog.text

    def test_supplied_timestamps_are_ignored(self, repository: RecordRepository, clock):
        expected = clock.current
        saved = repository.save({"title": "t", "createdAt": "1999-01-01T00:00:00Z"})
        assert saved.created_at == expected


class TestRecordRepositoryUpdate:
    """Tests for saving existing records."""

    def test_update_preserves_creation_time(self, repository: RecordRepository):
        saved = repository.save({"title": "before"})

        updated = repository.save({"id": saved.id, "title": "after"})

        assert updated.id == saved.id
        assert updated.title == "after"
        assert updated.created_at == saved.created_at
        assert updated.updated_at > saved.updated_at

    def test_update_with_wall_clock(self):
        """Without an injected clock updatedAt is still never before createdAt."""
        repository = RecordRepository(MemoryKeyValueStore(), key=RECORDS_KEY)
        saved = repository.save({"title": "A"})
        updated = repository.save({"id": saved.id, "title": "B"})
        assert updated.created_at == saved.created_at
        assert updated.updated_at >= saved.updated_at

    def test_partial_update_keeps_other_fields(self, repository: RecordRepository):
        saved = repository.save({"title": "A", "model": "GPT-4o", "tags": ["x"], "content": "body"})

        updated = repository.save(RecordDraft(id=saved.id, title="B"))

        assert updated.title == "B"
        assert updated.model == "GPT-4o"
        assert updated.tags == ["x"]
        assert updated.content == "body"

    def test_sequence_fields_are_replaced_not_merged(self, repository: RecordRepository):
        saved = repository.save({"tags": ["a", "b"]})
        updated = repository.save({"id": saved.id, "tags": ["c"]})
        assert updated.tags == ["c"]

    def test_save_full_record_instance(self, repository: RecordRepository):
        saved = repository.save({"title": "A"})
        edited = saved.model_copy(update={"title": "edited", "created_at": datetime(2000, 1, 1, tzinfo=timezone.utc)})

        result = repository.save(edited)

        assert result.title == "edited"
        assert result.created_at == saved.created_at
        assert repository.count() == 1

    def test_update_does_not_duplicate(self, repository: RecordRepository):
        saved = repository.save({"title": "A"})
        repository.save({"id": saved.id, "title": "B"})
        repository.save({"id": saved.id, "title": "C"})
        assert repository.count() == 1
        assert repository.get(saved.id).title == "C"

    def test_updated_at_never_precedes_created_at(self, kv, clock):
        """A record imported with a future createdAt still satisfies updatedAt >= createdAt."""
        repository = RecordRepository(kv, key=RECORDS_KEY, clock=clock)
        future = datetime(2030, 1, 1, tzinfo=timezone.utc)
        repository.replace_all([Record(id="f", created_at=future, updated_at=future)])

        updated = repository.save({"id": "f", "title": "now"})

        assert updated.created_at == future
        assert updated.updated_at >= updated.created_at


class TestRecordRepositoryDelete:
    """Tests for deleting records."""

    def test_delete_is_idempotent(self, repository: RecordRepository):
        keep = repository.save({"title": "keep"})
        drop = repository.save({"title": "drop"})

        assert repository.delete(drop.id) is True
        assert repository.count() == 1

        assert repository.delete(drop.id) is False
        assert repository.count() == 1
        assert repository.get(keep.id) is not None

    def test_delete_unknown_on_empty_store(self, repository: RecordRepository):
        assert repository.delete("nothing") is False
        assert repository.get_all() == []


class TestRecordRepositoryPersistence:
    """Tests for the stored blob."""

    def test_absent_blob_reads_empty(self, repository: RecordRepository):
        assert repository.get_all() == []
        assert repository.get("x") is None

    def test_corrupt_blob_reads_empty(self, kv, repository: RecordRepository, caplog):
        kv.set(RECORDS_KEY, b"{not json")

        with caplog.at_level(logging.ERROR, logger="llmlog.data.repository"):
            assert repository.get_all() == []

        assert "Failed to parse" in caplog.text

    def test_wrong_shape_blob_reads_empty(self, kv, repository: RecordRepository):
        kv.set(RECORDS_KEY, json.dumps({"id": "1"}).encode())
        assert repository.get_all() == []

    def test_bad_entry_does_not_hide_the_rest(self, kv, repository: RecordRepository, caplog):
        """One unreadable entry is dropped; its neighbours survive a later save."""
        blob = [
            {
                "id": "1",
                "title": "complete",
                "createdAt": "2023-05-01T10:00:00Z",
                "updatedAt": "2023-05-02T10:00:00Z",
            },
            {"id": "2", "title": "legacy", "createdAt": "2023-04-01T10:00:00Z"},
            {"id": "", "title": "broken"},
        ]
        kv.set(RECORDS_KEY, json.dumps(blob).encode())

        with caplog.at_level(logging.WARNING, logger="llmlog.data.repository"):
            assert [r.id for r in repository.get_all()] == ["1", "2"]
        assert "Dropping unreadable record 2" in caplog.text

        legacy = repository.get("2")
        assert legacy.updated_at == legacy.created_at

        repository.save(RecordDraft(title="new"))

        titles = [entry["title"] for entry in json.loads(kv.get(RECORDS_KEY))]
        assert titles == ["new", "complete", "legacy"]

    def test_blob_uses_wire_field_names(self, kv, repository: RecordRepository):
        repository.save({"title": "A", "tags": ["t"]})

        payload = json.loads(kv.get(RECORDS_KEY))

        assert isinstance(payload, list)
        assert set(payload[0]) == {
            "id", "title", "model", "tags", "content", "createdAt", "updatedAt", "comments",
        }
        assert payload[0]["createdAt"].startswith("2024-01-01T12:00:00")

    def test_every_save_rewrites_whole_collection(self, kv, repository: RecordRepository):
        first = repository.save({"title": "one"})
        repository.save({"title": "two"})

        payload = json.loads(kv.get(RECORDS_KEY))
        assert {item["title"] for item in payload} == {"one", "two"}
        assert first.id in {item["id"] for item in payload}

    def test_survives_reopen(self, tmp_path):
        """Records written through the file backend are visible to a new repository."""
        saved = RecordRepository(FileKeyValueStore(tmp_path), key=RECORDS_KEY).save({"title": "disk"})

        reopened = RecordRepository(FileKeyValueStore(tmp_path), key=RECORDS_KEY)

        assert reopened.get(saved.id).title == "disk"

    def test_last_write_wins(self, kv, clock):
        """Two repositories over one store do not detect each other's writes."""
        a = RecordRepository(kv, key=RECORDS_KEY, clock=clock)
        b = RecordRepository(kv, key=RECORDS_KEY, clock=clock)
        saved = a.save({"title": "shared"})

        stale = b.get(saved.id)
        a.save({"id": saved.id, "title": "from a"})
        b.save(stale.model_copy(update={"title": "from b"}))

        assert a.get(saved.id).title == "from b"
