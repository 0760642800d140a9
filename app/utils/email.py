"""Email utility — sends transactional emails via SMTP (TLS)."""
from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from enum import Enum

from app.core.config import settings

logger = logging.getLogger(__name__)


class DeliveryStatus(str, Enum):
    """Outcome of a send attempt. Only SENT means the SMTP server accepted it."""
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped_not_configured"


def _build_smtp_connection() -> smtplib.SMTP:
    """Open an authenticated SMTP connection (implicit TLS on 465, STARTTLS otherwise)."""
    if settings.SMTP_PORT == 465:
        conn = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=15)
    else:
        conn = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=15)
        conn.ehlo()
        conn.starttls()
        conn.ehlo()
    conn.login(settings.SMTP_USER, settings.SMTP_PASS)
    return conn


def send_email(to: str, subject: str, html_body: str, plain_body: str = "") -> DeliveryStatus:
    """
    Send a transactional email.

    Never raises. When SMTP credentials are missing ``SKIPPED`` is returned;
    outside production the body is written to the log so local setups keep
    working. Bodies carry OTPs and reset links, so production logs only the
    recipient and subject.
    """
    if not settings.email_configured:
        logger.warning(f"[Email] SMTP not configured, '{subject}' to {to} not sent")
        if settings.expose_debug_tokens:
            logger.info(f"[Email] To: {to}\nSubject: {subject}\n\n{plain_body or html_body}")
        return DeliveryStatus.SKIPPED

    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM}>"
        msg["To"] = to

        if plain_body:
            msg.attach(MIMEText(plain_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        with _build_smtp_connection() as conn:
            conn.sendmail(settings.EMAIL_FROM, [to], msg.as_string())

        logger.info(f"[Email] Sent '{subject}' → {to}")
        return DeliveryStatus.SENT

    except Exception as exc:
        logger.error(f"[Email] Failed to send '{subject}' to {to}: {exc}")
        return DeliveryStatus.FAILED


# ── Convenience senders ───────────────────────────────────────────────────────

_STYLE = """
    body { font-family: Arial, sans-serif; background: #f4f4f4; margin: 0; padding: 0; }
    .container { max-width: 520px; margin: 40px auto; background: #fff;
                 border-radius: 8px; padding: 32px; box-shadow: 0 2px 8px rgba(0,0,0,.1); }
    .logo { font-size: 26px; font-weight: 700; color: #2563eb; margin-bottom: 24px; }
    .otp { font-size: 40px; font-weight: 800; letter-spacing: 10px; color: #2563eb;
           background: #eff6ff; padding: 16px 24px; border-radius: 8px;
           display: inline-block; margin: 16px 0; font-family: 'Courier New', monospace; }
    .button { display: inline-block; background: #2563eb; color: #fff !important;
              padding: 12px 28px; border-radius: 6px; text-decoration: none; margin: 16px 0; }
    .footer { margin-top: 24px; font-size: 12px; color: #9ca3af; }
"""


def _wrap(inner: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>{_STYLE}</style>
</head>
<body>
  <div class="container">
    <div class="logo">EduLearn</div>
    {inner}
    <div class="footer">
      &copy; EduLearn &nbsp;|&nbsp; {settings.EMAIL_FROM}
    </div>
  </div>
</body>
</html>
"""


def send_otp_email(to: str, otp: str, full_name: str = "") -> DeliveryStatus:
    """Send a 6-digit OTP for email verification."""
    greeting = f"Hi {full_name}," if full_name else "Hello,"
    minutes = settings.OTP_EXPIRE_MINUTES
    html_body = _wrap(f"""
    <p>{greeting}</p>
    <p>Thanks for joining EduLearn! Use the code below to verify your email address.
       The code expires in <strong>{minutes} minutes</strong>.</p>
    <div class="otp">{otp}</div>
    <p>If you did not create an account, please ignore this email.</p>
""")
    plain_body = f"{greeting}\n\nYour EduLearn verification code is: {otp}\n\nExpires in {minutes} minutes."
    return send_email(to, "Verify your EduLearn account", html_body, plain_body)


def send_welcome_email(to: str, full_name: str = "") -> DeliveryStatus:
    """Send the welcome message after a successful email verification."""
    greeting = f"Hi {full_name}," if full_name else "Hello,"
    dashboard_url = f"{settings.FRONTEND_URL}/dashboard"
    html_body = _wrap(f"""
    <p>{greeting}</p>
    <p>Your email is verified and your EduLearn account is ready.
       Browse the catalogue and start your first course today.</p>
    <a href="{dashboard_url}" class="button">Go to dashboard</a>
""")
    plain_body = f"{greeting}\n\nYour EduLearn account is ready: {dashboard_url}"
    return send_email(to, "Welcome to EduLearn!", html_body, plain_body)


def send_password_reset_email(to: str, reset_token: str, full_name: str = "") -> DeliveryStatus:
    """Send a password reset link carrying the plaintext reset token."""
    greeting = f"Hi {full_name}," if full_name else "Hello,"
    reset_url = f"{settings.FRONTEND_URL}/reset-password/{reset_token}"
    minutes = settings.RESET_TOKEN_EXPIRE_MINUTES
    html_body = _wrap(f"""
    <p>{greeting}</p>
    <p>We received a request to reset your EduLearn password.
       This link is valid for <strong>{minutes} minutes</strong>.</p>
    <a href="{reset_url}" class="button">Reset password</a>
    <p>If you did not request a reset, you can safely ignore this email.</p>
""")
    plain_body = f"{greeting}\n\nReset your EduLearn password: {reset_url}\n\nThe link expires in {minutes} minutes."
    return send_email(to, "Reset your EduLearn password", html_body, plain_body)
