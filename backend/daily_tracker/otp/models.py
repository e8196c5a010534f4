"""One-time password model."""

from sqlalchemy import Column, DateTime, String, UniqueConstraint

from ..database.base import Base


class OtpCode(Base):
    __tablename__ = "otp_codes"

    id = Column(String(36), primary_key=True)
    identifier = Column(String(255), nullable=False)
    otp = Column(String(6), nullable=False)
    type = Column(String(10), nullable=False)  # email / phone
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (UniqueConstraint("identifier", "type", name="uq_otp_codes_identifier_type"),)
