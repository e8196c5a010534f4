"""Tests for OTP email delivery."""

import smtplib
from unittest.mock import patch

import pytest

from daily_tracker.config import settings
from daily_tracker.integrations.email import build_otp_email, email_diagnostics, send_otp_email


@pytest.fixture
def smtp_configured(monkeypatch):
    monkeypatch.setattr(settings, "smtp_user", "tracker@gmail.com")
    monkeypatch.setattr(settings, "smtp_password", "abcdabcdabcdabcd")
    monkeypatch.setattr(settings, "smtp_host", "smtp.gmail.com")


class TestBuildOtpEmail:
    def test_contains_code_and_expiry(self, smtp_configured):
        msg = build_otp_email("a@example.com", "Alice", "482913", "Password Reset OTP", 5)
        assert msg["To"] == "a@example.com"
        assert msg["Subject"] == "Password Reset OTP"
        text, html = (part.get_payload(decode=True).decode() for part in msg.get_payload())
        assert "482913" in text
        assert "5 minutes" in text
        assert "482913" in html

    def test_username_is_escaped_in_html(self, smtp_configured):
        msg = build_otp_email("a@example.com", "<b>Eve</b>", "111111", "OTP", 5)
        html = msg.get_payload()[1].get_payload(decode=True).decode()
        assert "<b>Eve</b>" not in html
        assert "&lt;b&gt;Eve&lt;/b&gt;" in html


class TestSendOtpEmail:
    def test_not_configured(self, monkeypatch):
        monkeypatch.setattr(settings, "smtp_user", "")
        with patch("daily_tracker.integrations.email.smtplib.SMTP") as smtp:
            assert send_otp_email("a@example.com", "Alice", "123456", "OTP") is False
        smtp.assert_not_called()

    def test_sends_with_starttls(self, smtp_configured):
        with patch("daily_tracker.integrations.email.smtplib.SMTP") as smtp:
            assert send_otp_email("a@example.com", "Alice", "123456", "OTP") is True
        server = smtp.return_value.__enter__.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("tracker@gmail.com", "abcdabcdabcdabcd")
        server.send_message.assert_called_once()

    def test_auth_failure_returns_false(self, smtp_configured):
        with patch("daily_tracker.integrations.email.smtplib.SMTP") as smtp:
            server = smtp.return_value.__enter__.return_value
            server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
            assert send_otp_email("a@example.com", "Alice", "123456", "OTP") is False

    def test_network_failure_returns_false(self, smtp_configured):
        with patch("daily_tracker.integrations.email.smtplib.SMTP", side_effect=OSError("unreachable")):
            assert send_otp_email("a@example.com", "Alice", "123456", "OTP") is False


class TestEmailDiagnostics:
    def test_configured(self, smtp_configured):
        report = email_diagnostics()
        assert report["emailConfigured"] is True
        assert report["issues"] == []
        assert report["smtpUser"] == "tra***"

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.setattr(settings, "smtp_user", "")
        monkeypatch.setattr(settings, "smtp_password", "")
        report = email_diagnostics()
        assert report["emailConfigured"] is False
        assert report["smtpUser"] == "NOT_SET"
        assert len(report["issues"]) == 2

    def test_gmail_password_length(self, smtp_configured, monkeypatch):
        monkeypatch.setattr(settings, "smtp_password", "short")
        report = email_diagnostics()
        assert any("expected 16" in issue for issue in report["issues"])
