"""OTP email delivery over SMTP."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate, make_msgid
from html import escape

from ..config import settings

logger = logging.getLogger(__name__)


def build_otp_email(to: str, username: str, otp: str, subject: str, ttl_minutes: int) -> MIMEMultipart:
    """Build a multipart OTP message (plain text + HTML)."""
    msg = MIMEMultipart("alternative")
    msg["From"] = formataddr((settings.smtp_sender_name, settings.smtp_user))
    msg["To"] = to
    msg["Date"] = formatdate(localtime=True)
    msg["Message-ID"] = make_msgid(domain=settings.smtp_user.split("@")[-1] if "@" in settings.smtp_user else "local")
    msg["Subject"] = subject

    text_body = (
        f"Hello {username},\n\n"
        f"Your OTP code is: {otp}\n\n"
        f"This code will expire in {ttl_minutes} minutes.\n"
        f"If you did not request it, you can ignore this email.\n\n"
        f"Best regards,\n"
        f"{settings.smtp_sender_name} Team\n"
    )

    safe_name = escape(username)
    html_body = f"""\
<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>{escape(subject)}</title></head>
<body style="margin:0; padding:0; background-color:#f4f4f5; font-family:Arial,Helvetica,sans-serif;">
  <table role="presentation" width="100%" cellpadding="0" cellspacing="0">
    <tr><td align="center" style="padding:24px 16px;">
      <table role="presentation" width="480" cellpadding="0" cellspacing="0"
             style="background-color:#ffffff; border-radius:8px;">
        <tr><td style="padding:32px;">
          <p style="margin:0 0 16px; color:#374151; font-size:15px;">Hello {safe_name},</p>
          <p style="margin:0 0 8px; color:#374151; font-size:15px;">Your OTP code is:</p>
          <p style="margin:0 0 16px; color:#1e40af; font-size:32px; font-weight:700; letter-spacing:6px;">{otp}</p>
          <p style="margin:0; color:#6b7280; font-size:13px;">
            This code will expire in {ttl_minutes} minutes. If you did not request it, ignore this email.
          </p>
        </td></tr>
      </table>
    </td></tr>
  </table>
</body>
</html>"""

    msg.attach(MIMEText(text_body, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    return msg


def send_otp_email(to: str, username: str, otp: str, subject: str) -> bool:
    """Send an OTP email via SMTP with STARTTLS. Returns True on success."""
    if not settings.email_configured:
        logger.error("SMTP not configured, cannot send OTP email to %s", to)
        return False

    msg = build_otp_email(to, username, otp, subject, settings.otp_ttl_minutes)
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=15) as server:
            server.ehlo()
            server.starttls()
            server.ehlo()
            server.login(settings.smtp_user, settings.smtp_password)
            server.send_message(msg)
    except smtplib.SMTPAuthenticationError:
        logger.exception("SMTP authentication failed, check SMTP_USER and SMTP_PASSWORD")
        return False
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send OTP email to %s", to)
        return False
    logger.info("OTP email sent to %s", to)
    return True


def email_diagnostics() -> dict:
    """Report SMTP configuration problems without exposing secrets."""
    issues: list[str] = []
    recommendations: list[str] = []
    if not settings.smtp_user:
        issues.append("SMTP_USER environment variable is not set")
        recommendations.append("Add SMTP_USER to the environment")
    if not settings.smtp_password:
        issues.append("SMTP_PASSWORD environment variable is not set")
        recommendations.append("Generate an app password for the mailbox and set SMTP_PASSWORD")
    elif "gmail" in settings.smtp_host and len(settings.smtp_password.replace(" ", "")) != 16:
        issues.append(f"SMTP_PASSWORD length is {len(settings.smtp_password)}, expected 16 characters")
        recommendations.append("Gmail app passwords are always 16 characters, verify the value")

    return {
        "emailConfigured": settings.email_configured,
        "smtpHost": settings.smtp_host,
        "smtpUser": settings.smtp_user[:3] + "***" if settings.smtp_user else "NOT_SET",
        "issues": issues,
        "recommendations": recommendations,
    }
