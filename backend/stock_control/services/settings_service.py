# Overview: Email integration settings; validation and the derived "configured" flag.

from __future__ import annotations

from ..errors import ValidationError


PROVIDER_GMAIL = "gmail"
PROVIDER_SMTP = "smtp"
PROVIDER_SENDGRID = "sendgrid"
PROVIDER_RESEND = "resend"

PROVIDERS = (PROVIDER_GMAIL, PROVIDER_SMTP, PROVIDER_SENDGRID, PROVIDER_RESEND)

# Fields that must be non-empty before a provider counts as configured
PROVIDER_REQUIRED_FIELDS = {
    PROVIDER_GMAIL: ("recipientEmail", "smtpUsername", "smtpPassword"),
    PROVIDER_SENDGRID: ("recipientEmail", "apiKey"),
    PROVIDER_RESEND: ("recipientEmail", "apiKey"),
    PROVIDER_SMTP: ("recipientEmail", "smtpHost", "smtpUsername", "smtpPassword"),
}

STRING_FIELDS = (
    "provider",
    "recipientEmail",
    "senderEmail",
    "smtpHost",
    "smtpUsername",
    "smtpPassword",
    "apiKey",
)

# Never echoed back to clients; a masked value posted back keeps the stored secret
SECRET_FIELDS = ("smtpPassword", "apiKey")
SECRET_MASK = "********"


def compute_configured(settings: dict | None) -> bool:
    """Unknown or missing provider is never configured."""
    if not settings:
        return False
    required = PROVIDER_REQUIRED_FIELDS.get(settings.get("provider"))
    if not required:
        return False
    return all(settings.get(field) for field in required)


def public_settings(settings: dict) -> dict:
    """Settings safe to return over HTTP: secrets are masked."""
    public = dict(settings)
    for field in SECRET_FIELDS:
        if public.get(field):
            public[field] = SECRET_MASK
    return public


def _clean(data: dict) -> dict:
    cleaned = {}
    for field in STRING_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field in SECRET_FIELDS and value == SECRET_MASK:
            continue
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{field} must be a string")
        cleaned[field] = value.strip() if isinstance(value, str) and field != "smtpPassword" else value

    if "smtpPort" in data:
        port = data["smtpPort"]
        if port in (None, ""):
            cleaned["smtpPort"] = None
        else:
            if isinstance(port, bool):
                raise ValidationError("smtpPort must be an integer")
            try:
                port = int(port)
            except (TypeError, ValueError):
                raise ValidationError("smtpPort must be an integer")
            if not 1 <= port <= 65535:
                raise ValidationError("smtpPort must be between 1 and 65535")
            cleaned["smtpPort"] = port

    provider = cleaned.get("provider")
    if provider and provider not in PROVIDERS:
        raise ValidationError(f"Unknown provider: {provider}. Must be one of {', '.join(PROVIDERS)}")
    return cleaned


def get_settings(store) -> dict:
    """Stored settings, or {"configured": False} before the first save."""
    return store.email_settings.get() or {"configured": False}


def save_settings(store, data: dict) -> dict:
    """
    Merge data into the stored settings and recompute configured.

    configured is always derived here; a client-supplied value is ignored.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    cleaned = _clean(data)
    merged = {**(store.email_settings.get() or {}), **cleaned}
    cleaned["configured"] = compute_configured(merged)
    return store.email_settings.save(cleaned)
