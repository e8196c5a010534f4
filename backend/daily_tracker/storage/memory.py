"""In-process storage backend.

One map per table, keyed by record id (OTP codes by ``(identifier, type)``).
Each map has its own lock so read-modify-write sequences stay atomic when
request handlers run on a thread pool. Data lives only as long as the process.
"""

import threading
from contextlib import ExitStack
from datetime import datetime

from pydantic import BaseModel

from ..auth.schemas import UserRecord
from ..otp.schemas import OtpChannel, OtpRecord
from .kinds import ENTITY_KINDS, EntityKind

_USERS = "users"
_OTP = "otp_codes"


class MemoryBackend:
    def __init__(self) -> None:
        tables = [_USERS, *(kind.table for kind in ENTITY_KINDS), _OTP]
        self._tables: dict[str, dict] = {name: {} for name in tables}
        self._locks: dict[str, threading.RLock] = {name: threading.RLock() for name in tables}

    @staticmethod
    def _copy(record: BaseModel | None):
        return record.model_copy() if record is not None else None

    # ── Users ──────────────────────────────────────────────────────────

    def insert_user(self, record: UserRecord) -> UserRecord:
        with self._locks[_USERS]:
            self._tables[_USERS][record.id] = record.model_copy()
        return record

    def get_user(self, user_id: str) -> UserRecord | None:
        with self._locks[_USERS]:
            return self._copy(self._tables[_USERS].get(user_id))

    def find_user(self, field: str, value: str) -> UserRecord | None:
        with self._locks[_USERS]:
            for user in self._tables[_USERS].values():
                if getattr(user, field) == value:
                    return self._copy(user)
        return None

    def update_user(self, user_id: str, changes: dict) -> UserRecord | None:
        with self._locks[_USERS]:
            users = self._tables[_USERS]
            current = users.get(user_id)
            if current is None:
                return None
            merged = current.model_copy(update=changes)
            users[user_id] = merged
            return merged.model_copy()

    def delete_user(self, user_id: str) -> bool:
        owned = [kind for kind in ENTITY_KINDS if kind.cascade_with_user]
        # Fixed acquisition order: users first, then entity tables in registry order.
        with ExitStack() as stack:
            stack.enter_context(self._locks[_USERS])
            for kind in owned:
                stack.enter_context(self._locks[kind.table])

            if user_id not in self._tables[_USERS]:
                return False
            for kind in owned:
                table = self._tables[kind.table]
                for entity_id in [k for k, rec in table.items() if rec.user_id == user_id]:
                    del table[entity_id]
            del self._tables[_USERS][user_id]
            return True

    # ── User-owned entities ────────────────────────────────────────────

    def insert(self, kind: EntityKind, record: BaseModel) -> BaseModel:
        with self._locks[kind.table]:
            self._tables[kind.table][record.id] = record.model_copy()
        return record

    def get(self, kind: EntityKind, entity_id: str) -> BaseModel | None:
        with self._locks[kind.table]:
            return self._copy(self._tables[kind.table].get(entity_id))

    def list_for_user(self, kind: EntityKind, user_id: str, since: datetime | None = None) -> list:
        with self._locks[kind.table]:
            rows = [
                rec.model_copy()
                for rec in self._tables[kind.table].values()
                if rec.user_id == user_id
                and (since is None or rec.created_at >= since)
                and not (kind.soft_delete and rec.is_trashed)
            ]
        rows.sort(key=lambda rec: rec.created_at, reverse=True)
        return rows

    def update(self, kind: EntityKind, entity_id: str, changes: dict) -> BaseModel | None:
        with self._locks[kind.table]:
            table = self._tables[kind.table]
            current = table.get(entity_id)
            if current is None:
                return None
            merged = current.model_copy(update=changes)
            table[entity_id] = merged
            return merged.model_copy()

    def delete(self, kind: EntityKind, entity_id: str) -> bool:
        with self._locks[kind.table]:
            return self._tables[kind.table].pop(entity_id, None) is not None

    # ── OTP codes ──────────────────────────────────────────────────────

    def put_otp(self, record: OtpRecord) -> OtpRecord:
        with self._locks[_OTP]:
            self._tables[_OTP][(record.identifier, OtpChannel(record.type))] = record.model_copy()
        return record

    def get_otp(self, identifier: str, channel: OtpChannel) -> OtpRecord | None:
        with self._locks[_OTP]:
            return self._copy(self._tables[_OTP].get((identifier, OtpChannel(channel))))

    def delete_otp(self, identifier: str, channel: OtpChannel) -> bool:
        with self._locks[_OTP]:
            return self._tables[_OTP].pop((identifier, OtpChannel(channel)), None) is not None
