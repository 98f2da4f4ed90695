"""
Shared pytest fixtures for llmlog tests.

Everything runs against an in-memory key-value store with a deterministic
clock so ordering assertions do not depend on wall-clock resolution.
"""

from datetime import datetime, timedelta, timezone

import pytest

from llmlog.data import RecordRepository
from llmlog.services import CommentService, ModelRegistry, SearchService, TransferService
from llmlog.storage import MemoryKeyValueStore

RECORDS_KEY = "llm_logs_data"
MODELS_KEY = "llm_logs_models"


class FakeClock:
    """Returns strictly increasing UTC timestamps, one step per call."""

    def __init__(self, start=None, step=timedelta(minutes=1)):
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def repository(kv, clock) -> RecordRepository:
    return RecordRepository(kv, key=RECORDS_KEY, clock=clock)


@pytest.fixture
def search(repository) -> SearchService:
    return SearchService(repository)


@pytest.fixture
def transfer(repository) -> TransferService:
    return TransferService(repository, indent=2)


@pytest.fixture
def comments(repository) -> CommentService:
    return CommentService(repository)


@pytest.fixture
def registry(kv, repository) -> ModelRegistry:
    return ModelRegistry(kv, repository, key=MODELS_KEY)
