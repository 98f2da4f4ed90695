"""Business logic services."""

from .comments import CommentService
from .query import SearchService
from .registry import DEFAULT_MODELS, ModelRegistry
from .transfer import ImportResult, TransferService

__all__ = [
    "CommentService",
    "SearchService",
    "ModelRegistry",
    "DEFAULT_MODELS",
    "ImportResult",
    "TransferService",
]
