"""Tests for database-to-memory failover."""

import logging
from datetime import timedelta

from sqlalchemy import select

from daily_tracker.auth.models import User
from daily_tracker.auth.schemas import UserCreate
from daily_tracker.database.base import Base
from daily_tracker.notes.schemas import NoteCreate
from daily_tracker.otp.schemas import OtpChannel
from daily_tracker.storage import BackendMode, Outcome, RecordStore, SqlBackend, create_store


def _user(name: str = "carol") -> UserCreate:
    return UserCreate(username=name, email=f"{name}@example.com", phone=f"+1{len(name)}", password_hash="h")


class SpyBackend(SqlBackend):
    """Counts database calls and fails while ``broken`` is set."""

    def __init__(self, engine) -> None:
        super().__init__(engine)
        self.calls: list[str] = []
        self.broken = False

    def call(self, operation: str, *args) -> Outcome:
        self.calls.append(operation)
        if self.broken:
            return Outcome.failure(ConnectionError("server closed the connection"))
        return super().call(operation, *args)


class TestOutcome:
    def test_success(self):
        outcome = Outcome.success(3)
        assert outcome.ok
        assert outcome.value == 3

    def test_failure(self):
        error = RuntimeError("boom")
        outcome = Outcome.failure(error)
        assert not outcome.ok
        assert outcome.error is error


class TestSqlBackendCall:
    def test_errors_become_failed_outcomes(self, make_engine):
        backend = SqlBackend(make_engine(create_schema=False))
        outcome = backend.call("get_user", "u1")
        assert not outcome.ok
        assert outcome.error is not None


class TestFailover:
    def test_starts_on_database_when_given_one(self, clock, make_engine):
        store = RecordStore(database=SpyBackend(make_engine()), clock=clock)
        assert store.mode is BackendMode.DATABASE

    def test_without_database_uses_memory(self, clock):
        assert RecordStore(clock=clock).mode is BackendMode.MEMORY

    def test_failed_call_is_rerun_in_memory(self, clock, make_engine):
        spy = SpyBackend(make_engine())
        store = RecordStore(database=spy, clock=clock)
        spy.broken = True

        created = store.users.create(_user())

        assert store.mode is BackendMode.MEMORY
        assert store.users.get(created.id) == created

    def test_failover_is_permanent(self, clock, make_engine):
        engine = make_engine()
        spy = SpyBackend(engine)
        store = RecordStore(database=spy, clock=clock)
        spy.broken = True
        store.notes.create(NoteCreate(title="first"))
        calls_at_failover = len(spy.calls)

        spy.broken = False
        user = store.users.create(_user("dave"))
        store.notes.create(NoteCreate(user_id=user.id, title="second"))
        store.otps.put("dave@example.com", OtpChannel.EMAIL, "123456", timedelta(minutes=5))

        assert store.mode is BackendMode.MEMORY
        assert len(spy.calls) == calls_at_failover
        with engine.connect() as conn:
            assert conn.execute(select(User)).all() == []
        assert store.users.get(user.id) is not None

    def test_missing_schema_triggers_failover(self, clock, make_engine):
        store = RecordStore(database=SqlBackend(make_engine(create_schema=False)), clock=clock)
        user = store.users.create(_user("erin"))
        assert store.mode is BackendMode.MEMORY
        assert store.users.get_by_email("erin@example.com") == user

    def test_failover_logged_once(self, clock, caplog, make_engine):
        spy = SpyBackend(make_engine())
        store = RecordStore(database=spy, clock=clock)
        spy.broken = True
        with caplog.at_level(logging.ERROR, logger="daily_tracker.storage.store"):
            store.users.get("a")
            store.users.get("b")
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1

    def test_fail_over_reports_first_transition_only(self, clock, make_engine):
        store = RecordStore(database=SpyBackend(make_engine()), clock=clock)
        assert store.fail_over("test") is True
        assert store.fail_over("again") is False


class TestCreateStore:
    def test_no_url_means_memory(self):
        assert create_store("").mode is BackendMode.MEMORY

    def test_unreachable_database_means_memory(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'missing' / 'dir' / 'app.db'}"
        assert create_store(url).mode is BackendMode.MEMORY

    def test_reachable_database(self, tmp_path):
        store = create_store(f"sqlite:///{tmp_path / 'app.db'}")
        try:
            assert store.mode is BackendMode.DATABASE
        finally:
            store.database.dispose()

    def test_schema_can_be_created_on_reachable_database(self, tmp_path, clock):
        store = create_store(f"sqlite:///{tmp_path / 'app.db'}", clock=clock)
        Base.metadata.create_all(store.database.engine)
        try:
            user = store.users.create(_user("frank"))
            assert store.mode is BackendMode.DATABASE
            assert store.users.get(user.id) == user
        finally:
            store.database.dispose()
