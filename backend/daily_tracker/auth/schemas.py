"""Authentication request/response schemas."""

from pydantic import EmailStr, Field

from ..records import RecordModel, WireModel


class UserRecord(RecordModel):
    id: str
    username: str
    email: str
    phone: str = ""
    password_hash: str


class UserCreate(WireModel):
    username: str
    email: str
    phone: str = ""
    password_hash: str


class RegisterRequest(WireModel):
    username: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=72)


class LoginRequest(WireModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class UserResponse(WireModel):
    id: str
    username: str
    email: str
    phone: str = ""


class EmailRequest(WireModel):
    email: EmailStr


class EmailOtpRequest(WireModel):
    email: EmailStr
    otp: str = Field(..., min_length=1, max_length=10)


class ResetPasswordRequest(EmailOtpRequest):
    password: str = Field(..., min_length=6, max_length=72)


class PhoneRequest(WireModel):
    phone: str = Field(..., min_length=1, max_length=50)


class PhoneOtpRequest(PhoneRequest):
    otp: str = Field(..., min_length=1, max_length=10)


class ChangePasswordRequest(WireModel):
    new_password: str = Field(..., min_length=6, max_length=72)


class UpdateInfoRequest(WireModel):
    username: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, min_length=1, max_length=50)
