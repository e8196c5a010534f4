"""Task request/response schemas."""

from datetime import datetime
from typing import ClassVar

from pydantic import Field

from ..records import DEFAULT_USER_ID, PartialUpdate, RecordModel, WireModel


class TaskRecord(RecordModel):
    id: str
    user_id: str
    title: str
    company: str
    url: str | None = None
    type: str
    completed: bool = False
    added_date: str
    created_at: datetime
    updated_at: datetime


class TaskCreate(WireModel):
    user_id: str = DEFAULT_USER_ID
    title: str = Field(..., max_length=500)
    company: str = Field(..., max_length=255)
    url: str | None = Field(None, max_length=2000)
    type: str = Field(..., max_length=100)
    completed: bool = False
    added_date: str = Field(..., max_length=50)


class TaskUpdate(PartialUpdate):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"url"})

    title: str | None = Field(None, max_length=500)
    company: str | None = Field(None, max_length=255)
    url: str | None = Field(None, max_length=2000)
    type: str | None = Field(None, max_length=100)
    completed: bool | None = None
    added_date: str | None = Field(None, max_length=50)
