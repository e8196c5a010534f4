"""Task model."""

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text

from ..database.base import Base
from ..records import DEFAULT_USER_ID


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, default=DEFAULT_USER_ID, index=True)
    title = Column(String(500), nullable=False)
    company = Column(String(255), nullable=False)
    url = Column(Text, nullable=True)
    type = Column(String(100), nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    added_date = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_tasks_user_created", "user_id", "created_at"),)
