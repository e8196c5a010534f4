"""Tracked job application model."""

from sqlalchemy import Column, DateTime, Index, String, Text

from ..database.base import Base
from ..records import DEFAULT_USER_ID


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, default=DEFAULT_USER_ID, index=True)
    url = Column(Text, nullable=False)
    title = Column(String(500), nullable=False)
    company = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    type = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    posted_date = Column(String(50), nullable=False)
    analyzed_date = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_jobs_user_created", "user_id", "created_at"),)
