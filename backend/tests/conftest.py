"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from daily_tracker.auth.schemas import UserCreate
from daily_tracker.database.base import Base
from daily_tracker.storage import RecordStore, SqlBackend

# Importing the storage package registers every model on Base.metadata.


class FakeClock:
    """Deterministic clock; call it to read, ``advance`` to move it."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


def sqlite_engine(create_schema: bool = True):
    """In-memory SQLite engine shared across sessions."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    if create_schema:
        Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    return RecordStore(clock=clock)


@pytest.fixture
def db_engine():
    engine = sqlite_engine()
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sql_store(db_engine, clock):
    return RecordStore(database=SqlBackend(db_engine), clock=clock)


@pytest.fixture(params=["memory", "database"])
def store(request, clock):
    """The same store contract on both backends."""
    if request.param == "memory":
        yield RecordStore(clock=clock)
        return
    engine = sqlite_engine()
    try:
        yield RecordStore(database=SqlBackend(engine), clock=clock)
    finally:
        engine.dispose()


def make_user(store: RecordStore, name: str = "alice", phone: str = "+15550001"):
    return store.users.create(
        UserCreate(
            username=name,
            email=f"{name}@example.com",
            phone=phone,
            password_hash="$2b$12$fakehash",
        )
    )


@pytest.fixture
def user(store):
    return make_user(store)


@pytest.fixture
def new_user():
    """Factory: ``new_user(store, name, phone)``."""
    return make_user


@pytest.fixture
def make_engine():
    """Factory for extra SQLite engines, disposed after the test."""
    engines = []

    def factory(create_schema: bool = True):
        engine = sqlite_engine(create_schema)
        engines.append(engine)
        return engine

    yield factory
    for engine in engines:
        engine.dispose()
