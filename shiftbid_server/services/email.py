# Copyright (C) 2024 ShiftBid Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Email sending service. Logs to console when SMTP not configured."""

import logging
import smtplib
from email.mime.text import MIMEText

from shiftbid_server.config import settings

logger = logging.getLogger(__name__)


def invite_email_body(invite_url: str, contract_percent: int, role: str) -> str:
    return (
        f"You have been invited to ShiftBid as {role.lower()} "
        f"with a {contract_percent}% contract.\n\n"
        f"Click the link below to create your account:\n\n{invite_url}\n\n"
        f"The link can be used once."
    )


async def send_email(to: str, subject: str, body: str) -> None:
    """Send a plain-text email. Logs to console if SMTP not configured."""
    if settings.smtp_host and settings.smtp_user:
        msg = MIMEText(body, "plain")
        msg["Subject"] = subject
        msg["From"] = settings.smtp_from
        msg["To"] = to
        try:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
                server.starttls()
                server.login(settings.smtp_user, settings.smtp_password or "")
                server.sendmail(settings.smtp_from, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.exception("Failed to send email to %s: %s", to, e)
    else:
        logger.info("Email (SMTP not configured): To=%s Subject=%s Body=%s", to, subject, body[:200])
