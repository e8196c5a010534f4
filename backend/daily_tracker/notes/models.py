"""Note model."""

from sqlalchemy import Column, DateTime, String, Text

from ..database.base import Base
from ..records import DEFAULT_USER_ID


class Note(Base):
    __tablename__ = "notes"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, default=DEFAULT_USER_ID, index=True)
    title = Column(String(500), nullable=False, default="")
    content = Column(Text, nullable=False, default="")
    color = Column(String(20), nullable=False, default="#ffffff")
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
