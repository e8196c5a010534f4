"""Drive models: folders and uploaded file metadata."""

from sqlalchemy import Boolean, Column, DateTime, String, Text

from ..database.base import Base
from ..records import DEFAULT_USER_ID


class Folder(Base):
    __tablename__ = "folders"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, default=DEFAULT_USER_ID, index=True)
    name = Column(String(255), nullable=False)
    parent_id = Column(String(36), nullable=True)  # null = root
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class StoredFile(Base):
    __tablename__ = "files"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, default=DEFAULT_USER_ID, index=True)
    folder_id = Column(String(36), nullable=True)
    name = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=False)
    size = Column(String(20), nullable=False)
    path = Column(Text, nullable=False)
    is_trashed = Column(Boolean, nullable=False, default=False)
    trashed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
