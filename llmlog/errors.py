"""
Project-wide exception hierarchy.
Read paths never raise these; they surface caller mistakes on mutations.
"""

__all__ = [
    "LLMLogError",
    "RecordNotFoundError",
    "CommentNotFoundError",
    "ModelNameConflictError",
]


class LLMLogError(Exception):
    """Root exception for all llmlog errors."""


class RecordNotFoundError(LLMLogError, LookupError):
    """Raised when an operation needs a Record that is not in the collection."""


class CommentNotFoundError(LLMLogError, LookupError):
    """Raised when a comment id does not exist on its parent Record."""


class ModelNameConflictError(LLMLogError, ValueError):
    """Raised when renaming a model label onto a label that already exists."""
