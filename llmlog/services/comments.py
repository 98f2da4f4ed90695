"""Comment editing on top of whole-record saves."""

from __future__ import annotations

import logging
from typing import List

from ..data import Comment, Record, RecordDraft, RecordRepository
from ..errors import CommentNotFoundError, RecordNotFoundError

logger = logging.getLogger(__name__)


class CommentService:
    """Adds, edits and removes comments by re-saving the parent record.

    There is no separate comment store: each call loads the record, changes
    its comment list and saves the record, which refreshes ``updatedAt``.
    """

    def __init__(self, repository: RecordRepository) -> None:
        self._repository = repository

    def add(self, record_id: str, text: str) -> Record:
        """Append a new comment to *record_id* and return the saved record."""

        record = self._load(record_id)
        self._require_text(text)
        comments = list(record.comments) + [Comment(text=text)]
        return self._store(record, comments)

    def edit(self, record_id: str, comment_id: str, text: str) -> Record:
        """Replace a comment's text; its ``createdAt`` is left untouched."""

        record = self._load(record_id)
        self._require_text(text)
        if record.find_comment(comment_id) is None:
            raise CommentNotFoundError(f"Comment {comment_id} not found on record {record_id}")
        comments = [
            comment.model_copy(update={"text": text}) if comment.id == comment_id else comment
            for comment in record.comments
        ]
        return self._store(record, comments)

    def delete(self, record_id: str, comment_id: str) -> Record:
        """Remove a comment. An unknown *comment_id* leaves the record as is."""

        record = self._load(record_id)
        comments = [comment for comment in record.comments if comment.id != comment_id]
        if len(comments) == len(record.comments):
            return record
        return self._store(record, comments)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _load(self, record_id: str) -> Record:
        record = self._repository.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"Record {record_id} not found")
        return record

    @staticmethod
    def _require_text(text: str) -> None:
        if not text or not text.strip():
            raise ValueError("Comment text is required")

    def _store(self, record: Record, comments: List[Comment]) -> Record:
        saved = self._repository.save(RecordDraft(id=record.id, comments=comments))
        logger.debug("Record %s now has %d comments", saved.id, len(saved.comments))
        return saved
