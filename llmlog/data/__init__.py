"""Record models and persistence."""

from .models import Comment, Record, RecordDraft
from .repository import RecordRepository

__all__ = [
    "Comment",
    "Record",
    "RecordDraft",
    "RecordRepository",
]
