"""Service helpers for composing and sending one-time password emails."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from html import escape
from typing import Protocol

from app.core.config import settings
from app.core.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    def send(self, to: str, subject: str, body: str, *, html_body: str | None = None) -> None: ...


def _wrap_email_html(*, title: str, intro: str, content: str, footer: str) -> str:
    return f"""\
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{escape(title)}</title>
  </head>
  <body style="margin:0;padding:0;background:#f8fafc;font-family:Helvetica,Arial,sans-serif;color:#000000;">
    <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="padding:24px 12px;">
      <tr>
        <td align="center">
          <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="max-width:560px;background:#ffffff;border-radius:12px;border:1px solid #e2e8f0;">
            <tr>
              <td style="padding:20px 24px;border-bottom:1px solid #e2e8f0;">
                <h1 style="margin:0;font-size:20px;line-height:1.3;">{escape(title)}</h1>
              </td>
            </tr>
            <tr>
              <td style="padding:24px;">
                <p style="margin:0 0 14px;font-size:15px;line-height:1.6;">{escape(intro)}</p>
                {content}
              </td>
            </tr>
            <tr>
              <td style="padding:16px 24px;background:#f8fafc;border-top:1px solid #e2e8f0;">
                <p style="margin:0;font-size:12px;line-height:1.6;color:#475569;">{escape(footer)}</p>
              </td>
            </tr>
          </table>
        </td>
      </tr>
    </table>
  </body>
</html>
"""


def build_otp_email(otp: str, *, app_name: str, minutes: int) -> tuple[str, str, str]:
    """Return ``(subject, text_body, html_body)`` for a password reset code."""
    subject = "Your OTP for Password Reset"
    body = (
        "Dear User,\n\n"
        f"Your OTP for resetting your {app_name} password is: {otp}\n\n"
        f"This OTP is valid for {minutes} minutes.\n\n"
        "Do not share it with anyone. If you did not request a password reset, ignore this email."
    )
    html_content = (
        '<p style="margin:0 0 12px;font-size:14px;">Your OTP is:</p>'
        '<div style="margin:0 0 18px;padding:14px;border:1px dashed #dc2626;border-radius:10px;text-align:center;">'
        f'<span style="font-size:30px;letter-spacing:7px;font-weight:700;color:#dc2626;">{escape(otp)}</span>'
        "</div>"
        f'<p style="margin:0;font-size:14px;">This OTP is valid for <b>{minutes} minutes</b>.</p>'
    )
    html_body = _wrap_email_html(
        title=f"{app_name} Password Reset",
        intro="Dear User,",
        content=html_content,
        footer="Do not share this code with anyone.",
    )
    return subject, body, html_body


class SmtpEmailSender:
    def __init__(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        use_tls: bool | None = None,
        timeout: float = 30,
    ) -> None:
        self.host = settings.SMTP_HOST if host is None else host
        self.port = settings.SMTP_PORT if port is None else port
        self.username = settings.SMTP_USER if username is None else username
        self.password = settings.SMTP_PASSWORD if password is None else password
        self.sender = settings.SMTP_FROM if sender is None else sender
        self.use_tls = settings.SMTP_TLS if use_tls is None else use_tls
        self.timeout = timeout

    def send(self, to: str, subject: str, body: str, *, html_body: str | None = None) -> None:
        if not self.host:
            logger.warning("SMTP not configured; cannot send to %s", to)
            raise DeliveryError("Email delivery is not configured")
        if not self.sender:
            logger.warning("SMTP_FROM not configured; cannot send to %s", to)
            raise DeliveryError("Email delivery is not configured")

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        if html_body:
            message.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.ehlo()
                if self.use_tls:
                    server.starttls()
                    server.ehlo()
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.exception("Email send failed: %s", to)
            raise DeliveryError() from exc
        logger.info("Email sent: %s", to)
