"""Authentication routes: sessions, account management and OTP flows."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..config import settings
from ..dependencies import get_current_user_id, get_otp_manager, get_quota, get_store
from ..drive.service import remove_user_uploads
from ..integrations.email import send_otp_email
from ..otp.schemas import OtpChannel
from ..otp.service import OtpManager
from ..quota.service import QuotaCounter
from ..rate_limit import limiter
from ..storage import RecordStore
from .schemas import (
    ChangePasswordRequest,
    EmailOtpRequest,
    EmailRequest,
    LoginRequest,
    PhoneOtpRequest,
    PhoneRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateInfoRequest,
    UserRecord,
    UserResponse,
)
from .service import DuplicateUserError, authenticate_user, ensure_identity_available, hash_password, register_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

_NO_STORE = {
    "Cache-Control": "no-store, no-cache, must-revalidate, private",
    "Pragma": "no-cache",
    "Expires": "0",
}
_INVALID_OTP = "Invalid or expired OTP"
_MAIL_FAILED = "Failed to send OTP email. Please verify your email configuration is correct."


def _public(user: UserRecord) -> dict:
    return UserResponse.model_validate(user).model_dump(by_alias=True)


def _start_session(request: Request, user: UserRecord) -> None:
    request.session.clear()
    request.session["user_id"] = user.id


@router.post("/register")
@limiter.limit(settings.rate_limit_auth)
def register(request: Request, body: RegisterRequest, store: RecordStore = Depends(get_store)):
    try:
        user = register_user(store, body)
    except DuplicateUserError as exc:
        logger.info("Registration rejected: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=400)
    _start_session(request, user)
    return _public(user)


@router.post("/login")
@limiter.limit(settings.rate_limit_auth)
def login(request: Request, body: LoginRequest, store: RecordStore = Depends(get_store)):
    user = authenticate_user(store, body.email, body.password)
    if not user:
        logger.info("Failed login for %s", body.email)
        return JSONResponse({"error": "Invalid email or password"}, status_code=401)
    _start_session(request, user)
    logger.info("Login: user=%s", user.id)
    return _public(user)


@router.post("/logout")
def logout(request: Request, quota: QuotaCounter = Depends(get_quota)):
    user_id = request.session.get("user_id")
    request.session.clear()
    if user_id:
        quota.reset(user_id)
        logger.info("Logout: user=%s, chat quota reset", user_id)
    return {"success": True}


@router.delete("/account")
def delete_account(
    request: Request,
    store: RecordStore = Depends(get_store),
    quota: QuotaCounter = Depends(get_quota),
    user_id: str = Depends(get_current_user_id),
):
    if not store.users.delete(user_id):
        return JSONResponse({"error": "User not found"}, status_code=404)
    remove_user_uploads(settings.upload_dir, user_id)
    quota.reset(user_id)
    request.session.clear()
    logger.info("Account deleted: user=%s", user_id)
    return {"success": True, "message": "Account deleted successfully"}


@router.get("/check")
def check(request: Request):
    return JSONResponse({"authenticated": bool(request.session.get("user_id"))}, headers=_NO_STORE)


@router.get("/me")
def me(store: RecordStore = Depends(get_store), user_id: str = Depends(get_current_user_id)):
    user = store.users.get(user_id)
    if user is None:
        return JSONResponse({"error": "User not found"}, status_code=404, headers=_NO_STORE)
    return JSONResponse(_public(user), headers=_NO_STORE)


# ── Forgot password (email channel) ────────────────────────────────────


@router.post("/forgot-password/send-otp")
@limiter.limit(settings.rate_limit_otp)
def forgot_password_send_otp(
    request: Request,
    body: EmailRequest,
    store: RecordStore = Depends(get_store),
    otp: OtpManager = Depends(get_otp_manager),
):
    user = store.users.get_by_email(body.email)
    if not user:
        return JSONResponse(
            {"error": "No account found with this email address. Please check your email and try again."},
            status_code=404,
        )
    code = otp.issue(body.email, OtpChannel.EMAIL)
    if not send_otp_email(body.email, user.username, code, "Password Reset OTP - Daily Tracker"):
        otp.consume(body.email, OtpChannel.EMAIL)
        return JSONResponse({"error": _MAIL_FAILED}, status_code=500)
    return {"success": True, "message": "If this email is registered, you will receive an OTP"}


@router.post("/forgot-password/verify-otp")
def forgot_password_verify_otp(body: EmailOtpRequest, otp: OtpManager = Depends(get_otp_manager)):
    if not otp.verify(body.email, body.otp, OtpChannel.EMAIL):
        return JSONResponse({"error": _INVALID_OTP}, status_code=400)
    return {"success": True, "message": "OTP verified"}


@router.post("/forgot-password/reset")
@router.post("/reset-password")
def reset_password(
    body: ResetPasswordRequest,
    store: RecordStore = Depends(get_store),
    otp: OtpManager = Depends(get_otp_manager),
):
    if not otp.verify(body.email, body.otp, OtpChannel.EMAIL):
        return JSONResponse({"error": _INVALID_OTP}, status_code=400)
    if not store.users.update_password_by_email(body.email, hash_password(body.password)):
        return JSONResponse({"error": "User not found"}, status_code=404)
    otp.consume(body.email, OtpChannel.EMAIL)
    logger.info("Password reset via OTP for %s", body.email)
    return {"success": True, "message": "Password reset successful"}


# ── Mobile login (phone channel, code delivered by email) ──────────────


@router.post("/mobile-login/send-otp")
@limiter.limit(settings.rate_limit_otp)
def mobile_login_send_otp(
    request: Request,
    body: PhoneRequest,
    store: RecordStore = Depends(get_store),
    otp: OtpManager = Depends(get_otp_manager),
):
    user = store.users.get_by_phone(body.phone)
    if not user:
        return JSONResponse({"error": "Phone number not registered"}, status_code=404)
    if not user.email:
        return JSONResponse({"error": "No email address registered for this phone number"}, status_code=500)
    code = otp.issue(body.phone, OtpChannel.PHONE)
    if not send_otp_email(user.email, user.username, code, "Mobile Login OTP - Daily Tracker"):
        otp.consume(body.phone, OtpChannel.PHONE)
        return JSONResponse({"error": _MAIL_FAILED}, status_code=500)
    return {"success": True, "message": "OTP sent to your registered email"}


@router.post("/mobile-login/verify-otp")
def mobile_login_verify_otp(
    request: Request,
    body: PhoneOtpRequest,
    store: RecordStore = Depends(get_store),
    otp: OtpManager = Depends(get_otp_manager),
):
    if not otp.verify(body.phone, body.otp, OtpChannel.PHONE):
        return JSONResponse({"error": _INVALID_OTP}, status_code=400)
    user = store.users.get_by_phone(body.phone)
    if not user:
        return JSONResponse({"error": "User not found"}, status_code=404)
    _start_session(request, user)
    otp.consume(body.phone, OtpChannel.PHONE)
    return {"success": True} | _public(user)


# ── Profile ────────────────────────────────────────────────────────────


@router.post("/change-password")
def change_password(
    body: ChangePasswordRequest,
    store: RecordStore = Depends(get_store),
    user_id: str = Depends(get_current_user_id),
):
    if not store.users.update_password(user_id, hash_password(body.new_password)):
        return JSONResponse({"error": "Failed to update password"}, status_code=500)
    logger.info("Password changed: user=%s", user_id)
    return {"message": "Password updated successfully"}


@router.patch("/update-info")
def update_info(
    body: UpdateInfoRequest,
    store: RecordStore = Depends(get_store),
    user_id: str = Depends(get_current_user_id),
):
    try:
        ensure_identity_available(store, body.email, body.phone, user_id=user_id)
    except DuplicateUserError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    if store.users.update(user_id, body.model_dump(exclude_unset=True)) is None:
        return JSONResponse({"error": "User not found"}, status_code=404)
    return {"success": True, "message": "User information updated successfully"}
