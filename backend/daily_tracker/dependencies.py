"""Shared FastAPI dependencies.

Process-wide services are built once in the lifespan and read from
``app.state``; request handlers receive them through these functions.
"""

from fastapi import Depends, Request

from .integrations.cache import CacheService
from .otp.service import OtpManager
from .quota.service import QuotaCounter
from .realtime.broadcaster import Broadcaster
from .storage import RecordStore


class AuthRequired(Exception):
    """Raised when the session has no user. Handled in main.py."""

    pass


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_otp_manager(request: Request) -> OtpManager:
    return request.app.state.otp


def get_quota(request: Request) -> QuotaCounter:
    return request.app.state.quota


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


def get_cache(request: Request) -> CacheService:
    return request.app.state.cache


def get_current_user_id(request: Request, store: RecordStore = Depends(get_store)) -> str:
    """Id of the logged-in user; clears stale sessions."""
    user_id = request.session.get("user_id")
    if not user_id or not isinstance(user_id, str):
        raise AuthRequired()
    if store.users.get(user_id) is None:
        request.session.clear()
        raise AuthRequired()
    return user_id
