"""Declarative base and engine factory."""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import QueuePool


class Base(DeclarativeBase):
    pass


def create_database_engine(url: str, connect_timeout: int = 10) -> Engine:
    """Create a pooled engine for an already repaired connection string."""
    connect_args = {}
    if url.startswith("postgresql"):
        connect_args["connect_timeout"] = connect_timeout
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=1800,
        connect_args=connect_args,
    )
