"""Drive request/response schemas."""

from datetime import datetime

from pydantic import Field

from ..records import DEFAULT_USER_ID, RecordModel, WireModel


class FolderRecord(RecordModel):
    id: str
    user_id: str
    name: str
    parent_id: str | None = None
    created_at: datetime
    updated_at: datetime


class FolderCreate(WireModel):
    user_id: str = DEFAULT_USER_ID
    name: str = Field(..., min_length=1, max_length=255)
    parent_id: str | None = None


class FileRecord(RecordModel):
    id: str
    user_id: str
    folder_id: str | None = None
    name: str
    original_name: str
    mime_type: str
    size: str
    path: str
    is_trashed: bool = False
    trashed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class FileCreate(WireModel):
    user_id: str = DEFAULT_USER_ID
    folder_id: str | None = None
    name: str
    original_name: str
    mime_type: str
    size: str
    path: str


class RenameRequest(WireModel):
    name: str = Field(..., min_length=1, max_length=255)
