"""Record and comment models shared by the repository and services."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(timezone.utc)


def new_id() -> str:
    """Return a random 128-bit identifier in canonical UUID form."""

    return str(uuid4())


def normalise_tags(value: Any) -> Any:
    """Strip every tag and drop empties, keeping order and duplicates."""

    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple)):
        return [str(tag).strip() for tag in value if str(tag).strip()]
    return value


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Comment(BaseModel):
    """A timestamped markdown annotation attached to a Record."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id)
    text: str = ""
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class Record(BaseModel):
    """One archived conversation transcript."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    title: str = ""
    model: str = ""
    tags: List[str] = Field(default_factory=list)
    content: str = ""
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
    comments: List[Comment] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _clean_tags(cls, value: Any) -> Any:
        return normalise_tags(value)

    @field_validator("title", "model", "content", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("comments", mode="before")
    @classmethod
    def _none_is_no_comments(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("created_at", "updated_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @model_validator(mode="before")
    @classmethod
    def _default_updated_at(cls, data: Any) -> Any:
        # Older archives store records without updatedAt.
        if isinstance(data, dict) and not (data.get("updatedAt") or data.get("updated_at")):
            created = data.get("createdAt") or data.get("created_at")
            if created:
                return {**data, "updatedAt": created}
        return data

    @model_validator(mode="after")
    def _updated_not_before_created(self) -> "Record":
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at
        return self

    def to_json_dict(self) -> dict:
        """Return the wire representation with the stored field names."""

        return self.model_dump(mode="json", by_alias=True)

    def find_comment(self, comment_id: str) -> Optional[Comment]:
        """Return the comment with *comment_id*, if attached."""

        for comment in self.comments:
            if comment.id == comment_id:
                return comment
        return None


class RecordDraft(BaseModel):
    """Partial record passed to ``RecordRepository.save``.

    Only fields explicitly provided count as present; they overwrite the
    stored values one by one. Timestamps are owned by the repository and any
    supplied in the input are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    title: Optional[str] = None
    model: Optional[str] = None
    tags: Optional[List[str]] = None
    content: Optional[str] = None
    comments: Optional[List[Comment]] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _clean_tags(cls, value: Any) -> Any:
        return None if value is None else normalise_tags(value)

    def present_fields(self) -> dict:
        """Return the explicitly supplied fields, excluding ``id``."""

        fields = {name: getattr(self, name) for name in self.model_fields_set if name != "id"}
        return {name: value for name, value in fields.items() if value is not None}
