from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class EmailSettings(db.Model):
    """
    Singleton email integration settings (id is always "default").

    configured is derived by settings_service from the provider's mandatory
    fields; it is stored so readers never recompute it.
    """
    __tablename__ = "email_settings"

    FIELD_COLUMNS = {
        "provider": "provider",
        "recipientEmail": "recipient_email",
        "senderEmail": "sender_email",
        "smtpHost": "smtp_host",
        "smtpPort": "smtp_port",
        "smtpUsername": "smtp_username",
        "smtpPassword": "smtp_password",
        "apiKey": "api_key",
        "configured": "configured",
    }

    id = db.Column(db.String(16), primary_key=True, default="default")

    # gmail, smtp, sendgrid, resend
    provider = db.Column(db.String(32), nullable=True)
    recipient_email = db.Column(db.String(255), nullable=True)
    sender_email = db.Column(db.String(255), nullable=True)
    smtp_host = db.Column(db.String(255), nullable=True)
    smtp_port = db.Column(db.Integer, nullable=True)
    smtp_username = db.Column(db.String(255), nullable=True)
    smtp_password = db.Column(db.String(255), nullable=True)
    api_key = db.Column(db.String(255), nullable=True)

    configured = db.Column(db.Boolean, nullable=False, default=False)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "provider": self.provider,
            "recipientEmail": self.recipient_email,
            "senderEmail": self.sender_email,
            "smtpHost": self.smtp_host,
            "smtpPort": self.smtp_port,
            "smtpUsername": self.smtp_username,
            "smtpPassword": self.smtp_password,
            "apiKey": self.api_key,
            "configured": self.configured,
            "updatedAt": to_utc_z(self.updated_at),
        }
