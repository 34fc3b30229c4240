"""Email utility: transactional emails via SMTP (TLS).

Services receive an ``EmailSender`` instead of importing a transport, so tests
can pass a recording fake. The convenience senders below render a template and
never raise: delivery is best-effort and a failure is only logged.
"""
from __future__ import annotations

import logging
import smtplib
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from examprep.core.config import Settings

logger = logging.getLogger(__name__)

BRAND = "ExamPrep"


class EmailSender:
    """``send(to, subject, html_body, plain_body) -> bool`` capability."""

    def send(self, to: str, subject: str, html_body: str, plain_body: str = "") -> bool:
        raise NotImplementedError


class SMTPEmailSender(EmailSender):
    def __init__(self, settings: Settings):
        self.settings = settings

    def _build_smtp_connection(self) -> smtplib.SMTP:
        """Open an authenticated SMTP TLS connection."""
        conn = smtplib.SMTP(self.settings.SMTP_HOST, self.settings.SMTP_PORT, timeout=15)
        conn.ehlo()
        conn.starttls()
        conn.ehlo()
        conn.login(self.settings.SMTP_USER, self.settings.SMTP_PASS)
        return conn

    def send(self, to: str, subject: str, html_body: str, plain_body: str = "") -> bool:
        """Send a transactional email. Returns True on success, False on failure."""
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.settings.EMAIL_FROM_NAME} <{self.settings.EMAIL_FROM}>"
            msg["To"] = to

            if plain_body:
                msg.attach(MIMEText(plain_body, "plain", "utf-8"))
            msg.attach(MIMEText(html_body, "html", "utf-8"))

            with self._build_smtp_connection() as conn:
                conn.sendmail(self.settings.EMAIL_FROM, [to], msg.as_string())

            logger.info(f"[Email] Sent '{subject}' → {to}")
            return True

        except Exception as exc:
            logger.error(f"[Email] Failed to send '{subject}' to {to}: {exc}")
            return False


class LoggingEmailSender(EmailSender):
    """Development sender used when no SMTP host is configured."""

    def send(self, to: str, subject: str, html_body: str, plain_body: str = "") -> bool:
        logger.info(f"[Email] SMTP not configured, not sending '{subject}' → {to}")
        if plain_body:
            logger.debug(f"[Email] Body for {to}:\n{plain_body}")
        return True


def build_email_sender(settings: Settings) -> EmailSender:
    if settings.smtp_configured:
        return SMTPEmailSender(settings)
    logger.warning("[Email] SMTP_HOST/SMTP_USER not set; emails will only be logged")
    return LoggingEmailSender()


# ── Templates ─────────────────────────────────────────────────────────────────

def _layout(title: str, body: str, accent: str = "#1e40af") -> str:
    year = datetime.now(timezone.utc).year
    return f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <style>
    body {{ font-family: Arial, sans-serif; background: #f4f4f4; margin: 0; padding: 0; }}
    .container {{ max-width: 520px; margin: 40px auto; background: #fff;
                  border-radius: 8px; padding: 32px; box-shadow: 0 2px 8px rgba(0,0,0,.1); }}
    .logo {{ font-size: 26px; font-weight: 700; color: {accent}; margin-bottom: 24px; }}
    .otp {{ font-size: 40px; font-weight: 800; letter-spacing: 10px; color: {accent};
            background: #eff6ff; padding: 16px 24px; border-radius: 8px;
            display: inline-block; margin: 16px 0; }}
    .highlight {{ color: {accent}; font-weight: 600; }}
    .footer {{ margin-top: 24px; font-size: 12px; color: #9ca3af; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="logo">{BRAND}</div>
    {body}
    <div class="footer">
      &copy; {year} {BRAND}. Your success, our mission.<br>
      This is an automated message, please do not reply.
    </div>
  </div>
</body>
</html>
"""


def _safe_send(sender: EmailSender, to: str, subject: str, html_body: str, plain_body: str) -> bool:
    try:
        return sender.send(to, subject, html_body, plain_body)
    except Exception as exc:
        logger.error(f"[Email] Sender raised while sending '{subject}' to {to}: {exc}")
        return False


_OTP_PURPOSE_TEXT = {
    "EMAIL_VERIFICATION": ("Verify your email", "verify your email address"),
    "PASSWORD_RESET": ("Password reset code", "reset your password"),
}


def send_otp_email(sender: EmailSender, to: str, otp: str, purpose: str = "EMAIL_VERIFICATION",
                   expire_minutes: int = 10) -> bool:
    """Send a 6-digit OTP for email verification or password reset."""
    title, action = _OTP_PURPOSE_TEXT.get(purpose, _OTP_PURPOSE_TEXT["EMAIL_VERIFICATION"])
    subject = f"{BRAND} - {title}"
    html_body = _layout(subject, f"""
    <p>Hello,</p>
    <p>You requested to {action}. Please use the following code.
       It expires in <strong>{expire_minutes} minutes</strong>.</p>
    <div class="otp">{otp}</div>
    <p>If you did not request this code, please ignore this email.</p>
""")
    plain_body = f"Hello,\n\nYour {BRAND} code to {action} is: {otp}\n\nExpires in {expire_minutes} minutes."
    return _safe_send(sender, to, subject, html_body, plain_body)


def send_welcome_email(sender: EmailSender, to: str, first_name: str) -> bool:
    subject = f"Welcome to {BRAND}!"
    html_body = _layout(subject, f"""
    <p>Hi {first_name},</p>
    <p>Congratulations! Your account has been successfully created.</p>
    <p>You can now take practice exams, track your performance and pick the
       plan that fits your preparation.</p>
    <p>Good luck with your exam preparation!</p>
""", accent="#047857")
    plain_body = f"Hi {first_name},\n\nWelcome to {BRAND}! Your account has been successfully created."
    return _safe_send(sender, to, subject, html_body, plain_body)


def send_account_action_otp_email(sender: EmailSender, to: str, otp: str, action: str,
                                  expire_minutes: int = 10) -> bool:
    """*action* is ``"disable"`` or ``"delete"``."""
    action_text = "disable your account" if action == "disable" else "permanently delete your account"
    subject = f"{action.capitalize()} {BRAND} Account Verification"
    html_body = _layout(subject, f"""
    <p>Hello,</p>
    <p>We received a request to <strong>{action_text}</strong>.</p>
    <p>Please use the following code to confirm this action.
       It expires in <strong>{expire_minutes} minutes</strong>.</p>
    <div class="otp">{otp}</div>
    <p>If you did not initiate this request, please secure your account
       immediately by changing your password.</p>
""", accent="#b91c1c")
    plain_body = f"Hello,\n\nUse code {otp} to {action_text}. Expires in {expire_minutes} minutes."
    return _safe_send(sender, to, subject, html_body, plain_body)


def send_support_ticket_confirmation_email(sender: EmailSender, to: str, ticket_number: str,
                                           issue_type: str) -> bool:
    subject = f"[{ticket_number}] Support Request Received"
    html_body = _layout(subject, f"""
    <p>Hello,</p>
    <p>We have received your support request. Our team will review it and get back to you shortly.</p>
    <p>Ticket number: <span class="highlight">{ticket_number}</span><br>
       Issue type: {issue_type}</p>
    <p>You can track the status of this ticket in your Settings &gt; Help tab.</p>
""")
    plain_body = f"Hello,\n\nWe received your support request {ticket_number} ({issue_type})."
    return _safe_send(sender, to, subject, html_body, plain_body)
