"""OTP record schema."""

import enum
from datetime import datetime

from ..records import RecordModel


class OtpChannel(enum.StrEnum):
    """Context an OTP was issued for."""

    EMAIL = "email"
    PHONE = "phone"


class OtpRecord(RecordModel):
    id: str
    identifier: str
    otp: str
    type: OtpChannel
    expires_at: datetime
    created_at: datetime
