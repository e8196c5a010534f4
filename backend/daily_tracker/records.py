"""Identifier and clock helpers, plus the base model for stored records."""

import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_USER_ID = "default-user"

Clock = Callable[[], datetime]


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RecordModel(WireModel):
    """A stored row. Timestamps are always timezone-aware UTC."""

    @field_validator("*", mode="after")
    @classmethod
    def _normalize_datetimes(cls, value: object) -> object:
        if isinstance(value, datetime):
            return as_utc(value)
        return value


class PartialUpdate(WireModel):
    """Update body: omitted fields are left alone.

    An explicit ``null`` is only accepted for fields listed in
    ``nullable_fields``; everywhere else it fails validation (422).
    """

    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_nulls(self):
        for name in sorted(self.model_fields_set):
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self


def to_wire(record: BaseModel) -> dict:
    """JSON-ready camelCase dict of a record."""
    return record.model_dump(mode="json", by_alias=True)
