"""
SMTP helpers and the notifier used by the password reset flow.
"""
from __future__ import annotations

import html
import logging
import os
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Dict

from core.errors import NotifyError

log = logging.getLogger("email")

# template id -> (plain text body, html body); both formatted with email and reset_url
TEMPLATES: Dict[str, tuple[str, str]] = {
    "password-reset": (
        "Hello {email},\n\n"
        "You have requested a password reset. Use this link to choose a new password:\n\n"
        "{reset_url}\n\n"
        "The link is valid for 1 hour. If you did not request this, ignore the email.",
        "<p>Hello {email},</p>"
        "<p>You have requested a password reset. Please click the following button to continue on "
        "and reset your password.</p>"
        '<p><a href="{reset_url}">Reset my password</a></p>'
        "<p>The link is valid for 1 hour. If you did not request this, ignore the email.</p>",
    ),
}


def _effective_from(email_from: str | None, email_user: str | None, smtp_server: str) -> str:
    if "gmail" in (smtp_server or "").lower() and email_user:
        return email_user
    return email_from or email_user or "noreply@example.com"


def render_template(template_id: str, **context: str) -> tuple[str, str]:
    """Return (text, html) bodies for ``template_id``."""
    try:
        text_tpl, html_tpl = TEMPLATES[template_id]
    except KeyError:
        raise NotifyError(f"Unknown email template: {template_id}") from None
    escaped = {k: html.escape(v or "", quote=True) for k, v in context.items()}
    return text_tpl.format(**context), html_tpl.format(**escaped)


def send_email(to_email: str, subject: str, text_body: str, html_body: str | None = None) -> None:
    email_user = os.getenv("EMAIL_USER")
    email_password = os.getenv("EMAIL_PASSWORD")
    email_from = os.getenv("EMAIL_FROM")
    smtp_server = os.getenv("SMTP_SERVER", "smtp.gmail.com")
    smtp_port = int(os.getenv("SMTP_PORT", "587"))
    timeout = float(os.getenv("SMTP_TIMEOUT_SECONDS", "10"))

    if not (email_user and email_password):
        raise RuntimeError("Email credentials not configured. Set EMAIL_USER and EMAIL_PASSWORD.")

    if html_body:
        msg = MIMEMultipart("alternative")
        msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))
    else:
        msg = MIMEText(text_body)
    msg["Subject"] = subject
    msg["From"] = _effective_from(email_from, email_user, smtp_server)
    msg["To"] = to_email

    with smtplib.SMTP(smtp_server, smtp_port, timeout=timeout) as server:
        server.starttls()
        server.login(email_user, email_password)
        server.sendmail(msg["From"], [to_email], msg.as_string())


class SmtpNotifier:
    """Sends templated account emails; any delivery failure raises NotifyError."""

    def send(self, *, template_id: str, user: Dict, subject: str, reset_url: str) -> None:
        text_body, html_body = render_template(template_id, email=user["email"], reset_url=reset_url)
        try:
            send_email(user["email"], subject, text_body, html_body)
        except (OSError, smtplib.SMTPException, RuntimeError, ValueError) as exc:
            # ValueError covers UnicodeEncodeError from smtplib on non-ASCII addresses
            log.error("Failed to send %s email to user_id=%s: %s", template_id, user.get("id"), exc)
            raise NotifyError() from exc


__all__ = ["TEMPLATES", "SmtpNotifier", "render_template", "send_email"]
