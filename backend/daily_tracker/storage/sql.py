"""Relational storage backend on SQLAlchemy.

Every operation runs in its own session and transaction. ``call`` never
raises: errors come back as a failed ``Outcome`` for the store to act on.
"""

import logging
from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Engine, delete, select, text
from sqlalchemy.orm import Session, sessionmaker

from ..auth.models import User
from ..auth.schemas import UserRecord
from ..database.base import create_database_engine
from ..otp.models import OtpCode
from ..otp.schemas import OtpChannel, OtpRecord
from .kinds import ENTITY_KINDS, EntityKind
from .outcome import Outcome

logger = logging.getLogger(__name__)


def _to_record(record_cls: type[BaseModel], row) -> BaseModel | None:
    if row is None:
        return None
    return record_cls.model_validate(row)


class SqlBackend:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, url: str, connect_timeout: int = 10) -> "SqlBackend":
        return cls(create_database_engine(url, connect_timeout))

    def ping(self) -> datetime | None:
        """Run a trivial query; raises if the database is unreachable."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT CURRENT_TIMESTAMP")).scalar()

    def call(self, operation: str, *args) -> Outcome:
        handler = getattr(self, operation)
        try:
            with self._sessions() as session, session.begin():
                value = handler(session, *args)
        except Exception as exc:
            return Outcome.failure(exc)
        return Outcome.success(value)

    def dispose(self) -> None:
        self.engine.dispose()

    # ── Users ──────────────────────────────────────────────────────────

    def insert_user(self, session: Session, record: UserRecord) -> UserRecord:
        session.add(User(**record.model_dump()))
        session.flush()
        return record

    def get_user(self, session: Session, user_id: str) -> UserRecord | None:
        return _to_record(UserRecord, session.get(User, user_id))

    def find_user(self, session: Session, field: str, value: str) -> UserRecord | None:
        row = session.scalars(select(User).where(getattr(User, field) == value).limit(1)).first()
        return _to_record(UserRecord, row)

    def update_user(self, session: Session, user_id: str, changes: dict) -> UserRecord | None:
        row = session.get(User, user_id)
        if row is None:
            return None
        for key, value in changes.items():
            setattr(row, key, value)
        session.flush()
        return _to_record(UserRecord, row)

    def delete_user(self, session: Session, user_id: str) -> bool:
        row = session.get(User, user_id)
        if row is None:
            return False
        for kind in ENTITY_KINDS:
            if kind.cascade_with_user:
                session.execute(delete(kind.model).where(kind.model.user_id == user_id))
        session.delete(row)
        logger.info("User %s and owned records deleted from database", user_id)
        return True

    # ── User-owned entities ────────────────────────────────────────────

    def insert(self, session: Session, kind: EntityKind, record: BaseModel) -> BaseModel:
        session.add(kind.model(**record.model_dump()))
        session.flush()
        return record

    def get(self, session: Session, kind: EntityKind, entity_id: str) -> BaseModel | None:
        return _to_record(kind.record, session.get(kind.model, entity_id))

    def list_for_user(
        self, session: Session, kind: EntityKind, user_id: str, since: datetime | None = None
    ) -> list:
        model = kind.model
        query = select(model).where(model.user_id == user_id)
        if since is not None:
            query = query.where(model.created_at >= since)
        if kind.soft_delete:
            query = query.where(model.is_trashed.is_(False))
        rows = session.scalars(query.order_by(model.created_at.desc())).all()
        return [kind.record.model_validate(row) for row in rows]

    def update(self, session: Session, kind: EntityKind, entity_id: str, changes: dict) -> BaseModel | None:
        row = session.get(kind.model, entity_id)
        if row is None:
            return None
        for key, value in changes.items():
            setattr(row, key, value)
        session.flush()
        return _to_record(kind.record, row)

    def delete(self, session: Session, kind: EntityKind, entity_id: str) -> bool:
        result = session.execute(delete(kind.model).where(kind.model.id == entity_id))
        return result.rowcount > 0

    # ── OTP codes ──────────────────────────────────────────────────────

    def put_otp(self, session: Session, record: OtpRecord) -> OtpRecord:
        session.execute(
            delete(OtpCode).where(OtpCode.identifier == record.identifier, OtpCode.type == record.type.value)
        )
        session.add(OtpCode(**record.model_dump(mode="python") | {"type": record.type.value}))
        session.flush()
        return record

    def get_otp(self, session: Session, identifier: str, channel: OtpChannel) -> OtpRecord | None:
        row = session.scalars(
            select(OtpCode).where(OtpCode.identifier == identifier, OtpCode.type == OtpChannel(channel).value)
        ).first()
        return _to_record(OtpRecord, row)

    def delete_otp(self, session: Session, identifier: str, channel: OtpChannel) -> bool:
        result = session.execute(
            delete(OtpCode).where(OtpCode.identifier == identifier, OtpCode.type == OtpChannel(channel).value)
        )
        return result.rowcount > 0
