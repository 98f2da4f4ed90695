"""Model label registry used to populate selection lists."""

from __future__ import annotations

import json
import logging
from typing import List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from ..config import settings
from ..data import RecordDraft, RecordRepository
from ..errors import ModelNameConflictError
from ..storage import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_MODELS = [
    "GPT-4o",
    "GPT-4 Turbo",
    "Claude 3.5 Sonnet",
    "Claude 3 Opus",
    "Gemini 1.5 Pro",
    "Gemini 1.5 Flash",
    "Llama 3",
    "Other",
]

_LABEL_LIST = TypeAdapter(List[str])


class ModelRegistry:
    """Ordered list of model labels, persisted independently of records.

    Records reference labels by value only; nothing here is enforced
    against the record collection except the explicit rename cascade.
    """

    def __init__(
        self,
        store: KeyValueStore,
        repository: RecordRepository,
        key: Optional[str] = None,
    ) -> None:
        self._store = store
        self._repository = repository
        self.key = key or settings.models_key

    def get_models(self) -> List[str]:
        """Return the stored labels, or the built-in defaults if none are stored."""

        raw = self._store.get(self.key)
        if raw is None:
            return list(DEFAULT_MODELS)
        try:
            return _LABEL_LIST.validate_json(raw)
        except (ValidationError, ValueError) as exc:
            logger.error("Failed to parse model list %r: %s", self.key, exc)
            return list(DEFAULT_MODELS)

    def save_models(self, models: Sequence[str]) -> None:
        """Overwrite the stored list verbatim (no deduplication)."""

        self._store.set(self.key, json.dumps(list(models), ensure_ascii=False).encode("utf-8"))

    def add(self, label: str) -> List[str]:
        """Append *label* unless it is blank or already listed."""

        label = label.strip()
        models = self.get_models()
        if not label or label in models:
            return models
        models.append(label)
        self.save_models(models)
        logger.info("Added model %r", label)
        return models

    def rename(self, old: str, new: str) -> int:
        """Rename a label and rewrite every record that uses it.

        The cascade saves each affected record individually; it is not atomic.

        Returns:
            Number of records moved to the new label.

        Raises:
            ModelNameConflictError: *new* is already a registered label.
        """

        new = new.strip()
        if not new or new == old:
            return 0

        models = self.get_models()
        if new in models:
            raise ModelNameConflictError(f"Model name already exists: {new}")

        if old in models:
            models[models.index(old)] = new
            self.save_models(models)

        updated = 0
        for record in self._repository.get_all():
            if record.model == old:
                self._repository.save(RecordDraft(id=record.id, model=new))
                updated += 1

        if updated:
            logger.info("Updated %d records from %r to %r", updated, old, new)
        return updated

    def delete(self, label: str) -> List[str]:
        """Drop *label* from the list. Records keep their model value."""

        models = [model for model in self.get_models() if model != label]
        self.save_models(models)
        return models
