"""Note request/response schemas."""

from datetime import datetime

from pydantic import Field

from ..records import DEFAULT_USER_ID, PartialUpdate, RecordModel, WireModel


class NoteRecord(RecordModel):
    id: str
    user_id: str
    title: str = ""
    content: str = ""
    color: str = "#ffffff"
    created_at: datetime
    updated_at: datetime


class NoteCreate(WireModel):
    user_id: str = DEFAULT_USER_ID
    title: str = Field("", max_length=500)
    content: str = ""
    color: str = Field("#ffffff", max_length=20)


class NoteUpdate(PartialUpdate):
    title: str | None = Field(None, max_length=500)
    content: str | None = None
    color: str | None = Field(None, max_length=20)
