"""Job request/response schemas."""

from datetime import datetime

from pydantic import Field

from ..records import DEFAULT_USER_ID, PartialUpdate, RecordModel, WireModel


class JobRecord(RecordModel):
    id: str
    user_id: str
    url: str
    title: str
    company: str
    location: str
    type: str
    description: str
    posted_date: str
    analyzed_date: str
    created_at: datetime
    updated_at: datetime


class JobCreate(WireModel):
    user_id: str = DEFAULT_USER_ID
    url: str = Field(..., max_length=2000)
    title: str = Field(..., max_length=500)
    company: str = Field(..., max_length=255)
    location: str = Field(..., max_length=255)
    type: str = Field(..., max_length=100)
    description: str
    posted_date: str = Field(..., max_length=50)
    analyzed_date: str = Field(..., max_length=50)


class JobUpdate(PartialUpdate):
    url: str | None = Field(None, max_length=2000)
    title: str | None = Field(None, max_length=500)
    company: str | None = Field(None, max_length=255)
    location: str | None = Field(None, max_length=255)
    type: str | None = Field(None, max_length=100)
    description: str | None = None
    posted_date: str | None = Field(None, max_length=50)
    analyzed_date: str | None = Field(None, max_length=50)
