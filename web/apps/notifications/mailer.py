"""Transactional email through the Brevo SMTP API.

``send_email`` returns ``True`` when Brevo accepted the message and
``False`` when sending was skipped (disabled, no API key or no sender).
A provider failure raises ``EmailDeliveryError`` and an unreadable stored
API key raises a configuration error. Callers that send mail after a state
change use ``try_send_email`` and report ``email_sent: false``.
"""

import logging
import re
from dataclasses import dataclass

import httpx
from django.conf import settings

from apps.common.errors import StoreError, UpstreamError
from apps.common.http import error_detail, http_timeout, request_headers
from apps.site_settings.services import get_secret

logger = logging.getLogger(__name__)

_NAMED_ADDRESS = re.compile(r"^(.*)<([^>]+)>$")


class EmailDeliveryError(UpstreamError):
    default_message = "Email delivery failed."


@dataclass(frozen=True)
class Sender:
    email: str
    name: str | None = None

    def as_payload(self) -> dict:
        return {"email": self.email, "name": self.name} if self.name else {"email": self.email}


def get_sender() -> Sender | None:
    """Resolve the sender from ``BREVO_SENDER_*`` or ``EMAIL_FROM``.

    ``EMAIL_FROM`` may be a bare address or ``"Name <address>"``.
    """
    email_override = (settings.BREVO_SENDER_EMAIL or "").strip()
    name_override = (settings.BREVO_SENDER_NAME or "").strip()
    if email_override:
        return Sender(email_override, name_override or None)

    raw = (settings.EMAIL_FROM or "").strip()
    if not raw:
        return None
    match = _NAMED_ADDRESS.match(raw)
    if match:
        name = match.group(1).strip().strip('"')
        email = match.group(2).strip()
        return Sender(email, name or None) if email else None
    return Sender(raw)


def send_email(to: str, subject: str, html: str, text: str | None = None) -> bool:
    if settings.EMAIL_DISABLED:
        logger.info("email skipped", extra={"reason": "disabled", "subject": subject})
        return False

    api_key = get_secret("brevo_api_key")
    sender = get_sender()
    if not api_key or not sender:
        logger.info("email skipped", extra={"reason": "not configured", "subject": subject})
        return False

    payload = {
        "sender": sender.as_payload(),
        "to": [{"email": to}],
        "subject": subject,
        "htmlContent": html,
        "textContent": text,
    }
    try:
        with httpx.Client(timeout=http_timeout()) as client:
            resp = client.post(
                settings.BREVO_API_URL,
                json=payload,
                headers=request_headers({"api-key": api_key}),
            )
    except httpx.HTTPError as exc:
        logger.warning("email failed", extra={"detail": str(exc), "subject": subject})
        raise EmailDeliveryError()
    if resp.status_code >= 300:
        logger.warning(
            "email failed",
            extra={"status": resp.status_code, "detail": error_detail(resp), "subject": subject},
        )
        raise EmailDeliveryError()
    logger.info("email sent", extra={"subject": subject})
    return True


def try_send_email(to: str, subject: str, html: str, text: str | None = None) -> bool:
    """``send_email`` for callers that must not fail on email problems."""
    try:
        return send_email(to, subject, html, text)
    except EmailDeliveryError:
        return False
    except StoreError as exc:
        logger.warning("email skipped", extra={"reason": exc.message, "subject": subject})
        return False
