"""Dual-backend record store with one-way failover.

The store starts on the database when one is configured and reachable. The
first failed database call moves it to ``BackendMode.MEMORY`` for the rest of
the process; the failed operation is then re-run in memory so callers always
get an answer. There is no transition back.
"""

import enum
import logging
import threading
from datetime import datetime, timedelta

from pydantic import BaseModel

from ..auth.schemas import UserCreate, UserRecord
from ..otp.schemas import OtpChannel, OtpRecord
from ..records import Clock, as_utc, new_id, utcnow
from .kinds import FILES, FOLDERS, IMMUTABLE_FIELDS, JOBS, NOTES, TASKS, EntityKind
from .memory import MemoryBackend
from .sql import SqlBackend

logger = logging.getLogger(__name__)


class BackendMode(enum.StrEnum):
    DATABASE = "database"
    MEMORY = "memory"


class RecordStore:
    def __init__(
        self,
        memory: MemoryBackend | None = None,
        database: SqlBackend | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._memory = memory or MemoryBackend()
        self._database = database
        self._mode = BackendMode.DATABASE if database is not None else BackendMode.MEMORY
        self._mode_lock = threading.Lock()
        self.clock = clock

        self.users = UserRepository(self)
        self.jobs = EntityRepository(self, JOBS)
        self.tasks = EntityRepository(self, TASKS)
        self.notes = EntityRepository(self, NOTES)
        self.folders = EntityRepository(self, FOLDERS)
        self.files = FileRepository(self, FILES)
        self.otps = OtpRepository(self)

    @property
    def mode(self) -> BackendMode:
        with self._mode_lock:
            return self._mode

    @property
    def database(self) -> SqlBackend | None:
        return self._database

    def fail_over(self, reason: str) -> bool:
        """Switch to memory permanently. Returns False if already switched."""
        with self._mode_lock:
            if self._mode is BackendMode.MEMORY:
                return False
            self._mode = BackendMode.MEMORY
        logger.error(
            "Database unavailable (%s): switched to in-memory storage, data will be lost on restart",
            reason,
        )
        return True

    def execute(self, operation: str, *args):
        """Run ``operation`` on the active backend, failing over on database error."""
        if self.mode is BackendMode.DATABASE:
            outcome = self._database.call(operation, *args)
            if outcome.ok:
                return outcome.value
            logger.warning("Database error during %s: %r", operation, outcome.error)
            self.fail_over(f"{operation}: {type(outcome.error).__name__}")
        return getattr(self._memory, operation)(*args)

    def now(self) -> datetime:
        return as_utc(self.clock())


class UserRepository:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def create(self, data: UserCreate) -> UserRecord:
        record = UserRecord(id=new_id(), **data.model_dump())
        created = self._store.execute("insert_user", record)
        logger.info("User created: id=%s username=%s", created.id, created.username)
        return created

    def get(self, user_id: str) -> UserRecord | None:
        return self._store.execute("get_user", user_id)

    def get_by_username(self, username: str) -> UserRecord | None:
        return self._store.execute("find_user", "username", username)

    def get_by_email(self, email: str) -> UserRecord | None:
        return self._store.execute("find_user", "email", email)

    def get_by_phone(self, phone: str) -> UserRecord | None:
        return self._store.execute("find_user", "phone", phone)

    def update(self, user_id: str, changes: dict) -> UserRecord | None:
        allowed = {k: v for k, v in changes.items() if k in {"username", "email", "phone"} and v is not None}
        return self._store.execute("update_user", user_id, allowed)

    def update_password(self, user_id: str, password_hash: str) -> bool:
        updated = self._store.execute("update_user", user_id, {"password_hash": password_hash})
        if updated is None:
            logger.info("Password update skipped, user %s not found", user_id)
        return updated is not None

    def update_password_by_email(self, email: str, password_hash: str) -> bool:
        user = self.get_by_email(email)
        if user is None:
            return False
        return self.update_password(user.id, password_hash)

    def delete(self, user_id: str) -> bool:
        """Delete the user together with every record they own."""
        return self._store.execute("delete_user", user_id)


class EntityRepository:
    """CRUD for one user-owned entity kind."""

    def __init__(self, store: RecordStore, kind: EntityKind) -> None:
        self._store = store
        self.kind = kind

    def create(self, data: BaseModel) -> BaseModel:
        now = self._store.now()
        record = self.kind.record(id=new_id(), created_at=now, updated_at=now, **data.model_dump())
        return self._store.execute("insert", self.kind, record)

    def get(self, entity_id: str) -> BaseModel | None:
        return self._store.execute("get", self.kind, entity_id)

    def get_owned(self, entity_id: str, user_id: str) -> BaseModel | None:
        """The record if it exists and belongs to ``user_id``."""
        record = self.get(entity_id)
        if record is None or record.user_id != user_id:
            return None
        return record

    def list_for_user(self, user_id: str) -> list:
        return self._store.execute("list_for_user", self.kind, user_id, None)

    def list_since(self, user_id: str, since: datetime) -> list:
        return self._store.execute("list_for_user", self.kind, user_id, as_utc(since))

    def update(self, entity_id: str, changes: dict) -> BaseModel | None:
        merged = {k: v for k, v in changes.items() if k not in IMMUTABLE_FIELDS}
        merged["updated_at"] = self._store.now()
        return self._store.execute("update", self.kind, entity_id, merged)

    def delete(self, entity_id: str) -> bool:
        return self._store.execute("delete", self.kind, entity_id)


class FileRepository(EntityRepository):
    def delete(self, entity_id: str) -> bool:
        """Move the file to trash; it stays fetchable by id."""
        now = self._store.now()
        trashed = self._store.execute(
            "update", self.kind, entity_id, {"is_trashed": True, "trashed_at": now, "updated_at": now}
        )
        return trashed is not None


class OtpRepository:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def put(self, identifier: str, channel: OtpChannel, code: str, ttl: timedelta) -> OtpRecord:
        """Store ``code``, replacing any live code for the same pair."""
        now = self._store.now()
        record = OtpRecord(
            id=new_id(),
            identifier=identifier,
            otp=code,
            type=channel,
            expires_at=now + ttl,
            created_at=now,
        )
        return self._store.execute("put_otp", record)

    def get(self, identifier: str, channel: OtpChannel) -> OtpRecord | None:
        return self._store.execute("get_otp", identifier, OtpChannel(channel))

    def delete(self, identifier: str, channel: OtpChannel) -> bool:
        return self._store.execute("delete_otp", identifier, OtpChannel(channel))


def create_store(database_url: str, connect_timeout: int = 10, clock: Clock = utcnow) -> RecordStore:
    """Build the store, falling back to memory when no database is usable."""
    memory = MemoryBackend()
    if not database_url:
        logger.warning("No DATABASE_URL configured: using in-memory storage, data will NOT persist")
        return RecordStore(memory, None, clock)

    try:
        database = SqlBackend.from_url(database_url, connect_timeout)
        server_time = database.ping()
    except Exception:
        logger.exception("Database connection test failed, falling back to in-memory storage")
        return RecordStore(memory, None, clock)

    logger.info("Database connected (server time %s), data will persist", server_time)
    return RecordStore(memory, database, clock)
