"""One-time password issuance and verification.

A code is a 6-digit string valid for a short TTL. At most one live code exists
per ``(identifier, channel)``: issuing again replaces the previous one.
Expired codes are deleted when they are read.
"""

import hmac
import logging
import secrets
from collections.abc import Callable
from datetime import timedelta

from ..storage import RecordStore
from .schemas import OtpChannel

logger = logging.getLogger(__name__)

OTP_TTL = timedelta(minutes=5)


def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))


class OtpManager:
    def __init__(
        self,
        store: RecordStore,
        ttl: timedelta = OTP_TTL,
        code_factory: Callable[[], str] = generate_code,
    ) -> None:
        self._store = store
        self._ttl = ttl
        self._code_factory = code_factory

    def issue(self, identifier: str, channel: OtpChannel) -> str:
        code = self._code_factory()
        self._store.otps.put(identifier, OtpChannel(channel), code, self._ttl)
        logger.info("OTP issued for %s (%s)", identifier, channel)
        return code

    def verify(self, identifier: str, code: str, channel: OtpChannel) -> bool:
        record = self._store.otps.get(identifier, channel)
        if record is None:
            logger.info("No OTP on record for %s (%s)", identifier, channel)
            return False
        if self._store.now() > record.expires_at:
            self._store.otps.delete(identifier, channel)
            logger.info("OTP expired for %s (%s)", identifier, channel)
            return False
        valid = hmac.compare_digest(record.otp.encode(), str(code).strip().encode())
        logger.info("OTP %s for %s (%s)", "verified" if valid else "rejected", identifier, channel)
        return valid

    def consume(self, identifier: str, channel: OtpChannel) -> None:
        self._store.otps.delete(identifier, channel)
