# Overview: Email notifications for received transfers; renders the template and hands off to SMTP.

"""
Transfer Notifications

WHY: Head office needs to know when stock lands, and especially when it
lands short or damaged. The email is a side effect of the received
transition, never a precondition for it.

DELIVERY:
- Subscribed to TransferReceived on the EventBus
- Skips (and logs) when email settings are not configured
- Provider settings map onto an SMTP endpoint; every connection carries
  NOTIFICATION_TIMEOUT_SECONDS
- Any delivery problem is raised as NotificationError; the bus logs it
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

from flask import render_template

from ..errors import NotificationError, ValidationError
from .events import TransferReceived
from .settings_service import (
    PROVIDER_GMAIL,
    PROVIDER_RESEND,
    PROVIDER_SENDGRID,
    PROVIDER_SMTP,
    compute_configured,
)


logger = logging.getLogger(__name__)

SYSTEM_NAME = "Fairfield Stock Control System"
DEFAULT_SMTP_PORT = 587
IMPLICIT_TLS_PORT = 465

TEMPLATE_TRANSFER_RECEIVED = "email/transfer_received.html"


@dataclass(frozen=True)
class SmtpEndpoint:
    host: str
    port: int
    username: Optional[str]
    password: Optional[str]
    implicit_tls: bool = False


def resolve_endpoint(settings: dict) -> SmtpEndpoint:
    """Map provider settings onto the SMTP endpoint that delivers for it."""
    provider = settings.get("provider")
    if provider == PROVIDER_GMAIL:
        return SmtpEndpoint("smtp.gmail.com", DEFAULT_SMTP_PORT,
                            settings.get("smtpUsername"), settings.get("smtpPassword"))
    if provider == PROVIDER_SMTP:
        port = settings.get("smtpPort") or DEFAULT_SMTP_PORT
        return SmtpEndpoint(settings.get("smtpHost"), port,
                            settings.get("smtpUsername"), settings.get("smtpPassword"),
                            implicit_tls=port == IMPLICIT_TLS_PORT)
    if provider == PROVIDER_SENDGRID:
        return SmtpEndpoint("smtp.sendgrid.net", DEFAULT_SMTP_PORT, "apikey", settings.get("apiKey"))
    if provider == PROVIDER_RESEND:
        return SmtpEndpoint("smtp.resend.com", DEFAULT_SMTP_PORT, "resend", settings.get("apiKey"))
    raise NotificationError(f"Unsupported email provider: {provider}")


def render_transfer_email(
    transfer: dict,
    from_location: str,
    to_location: str,
    *,
    is_test: bool = False,
) -> tuple[str, str]:
    """Return (subject, html body). Needs an application context."""
    if is_test:
        subject = f"Test Email - {SYSTEM_NAME}"
    else:
        subject = f"Transfer #{transfer['id']} Received"
    html = render_template(
        TEMPLATE_TRANSFER_RECEIVED,
        transfer=transfer,
        from_location=from_location,
        to_location=to_location,
        is_test=is_test,
        system_name=SYSTEM_NAME,
    )
    return subject, html


def sample_transfer() -> dict:
    """Fixed transfer used by the integration test email."""
    return {
        "id": "TEST-001",
        "fromLocationId": "test-from",
        "toLocationId": "test-to",
        "driverName": "Test Driver",
        "vehicleReg": "TEST-123",
        "status": "received",
        "items": [{
            "productId": "test-product",
            "productCode": "TEST-001",
            "productName": "Test Product",
            "quantity": 10,
            "unit": "pieces",
        }],
        "shortages": [],
        "damages": [],
        "createdBy": "system",
    }


class EmailNotifier:
    """Sends transfer emails using whatever settings are stored at send time."""

    def __init__(self, store, *, default_sender: str, timeout: float):
        self.store = store
        self.default_sender = default_sender
        self.timeout = timeout

    def on_transfer_received(self, event: TransferReceived) -> None:
        settings = self.store.email_settings.get()
        if not compute_configured(settings):
            logger.info("Email not configured; skipping notification for transfer %s", event.transfer["id"])
            return

        recipient = event.recipient_email or settings.get("recipientEmail")
        subject, html = render_transfer_email(
            event.transfer, event.from_location_name, event.to_location_name
        )
        self.send(settings, recipient, subject, html)
        logger.info("Transfer %s notification sent to %s", event.transfer["id"], recipient)

    def send_test_email(self) -> str:
        """Send the sample notification; returns the recipient address."""
        settings = self.store.email_settings.get()
        if not compute_configured(settings):
            raise ValidationError("Email not configured")
        subject, html = render_transfer_email(
            sample_transfer(), "Test Warehouse", "Test Branch", is_test=True
        )
        self.send(settings, settings["recipientEmail"], subject, html)
        return settings["recipientEmail"]

    def send(self, settings: dict, recipient: str, subject: str, html: str) -> None:
        endpoint = resolve_endpoint(settings)

        message = EmailMessage()
        message["From"] = settings.get("senderEmail") or self.default_sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(f"{subject}\n\nThis message requires an HTML-capable mail client.")
        message.add_alternative(html, subtype="html")

        try:
            if endpoint.implicit_tls:
                client = smtplib.SMTP_SSL(endpoint.host, endpoint.port, timeout=self.timeout)
            else:
                client = smtplib.SMTP(endpoint.host, endpoint.port, timeout=self.timeout)
            with client:
                if not endpoint.implicit_tls:
                    client.starttls()
                if endpoint.username:
                    client.login(endpoint.username, endpoint.password or "")
                client.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"Failed to send email to {recipient}: {exc}") from exc
