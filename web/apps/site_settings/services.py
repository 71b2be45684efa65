"""Read and update the store settings row and its encrypted credentials."""

import logging

from django.conf import settings
from django.db import transaction

from .encryption import encrypt_secret, decrypt_secret
from .models import SECRET_FIELDS, WebsiteSetting

logger = logging.getLogger(__name__)

# Settings attribute used when the database holds no value for a secret.
ENV_FALLBACKS = {
    "stripe_secret_key": "STRIPE_SECRET_KEY",
    "stripe_publishable_key": "STRIPE_PUBLISHABLE_KEY",
    "paypal_client_id": "PAYPAL_CLIENT_ID",
    "paypal_client_secret": "PAYPAL_CLIENT_SECRET",
}

PLAIN_FIELDS = ("store_name", "domain", "website_title", "website_description", "default_currency")


def get_settings() -> WebsiteSetting | None:
    return WebsiteSetting.objects.order_by("id").first()


def get_secret(name: str, row: WebsiteSetting | None = None) -> str:
    """Return the plaintext credential ``name`` or an empty string.

    The encrypted database value wins; otherwise the environment-backed
    Django setting listed in ``ENV_FALLBACKS`` is used.

    Args:
        name: Key of ``SECRET_FIELDS`` (e.g. ``"stripe_secret_key"``).
        row: Settings row already loaded by the caller, to avoid a query.

    Raises:
        KeyError: For an unknown credential name.
        EncryptionKeyMissing, InvalidEncryptedPayload: When a stored value
            cannot be decrypted.
    """
    column = SECRET_FIELDS[name]
    if row is None:
        row = get_settings()
    encrypted = (getattr(row, column, None) or "").strip() if row else ""
    if encrypted:
        return decrypt_secret(encrypted)
    fallback = ENV_FALLBACKS.get(name)
    return (getattr(settings, fallback, "") or "").strip() if fallback else ""


def secret_flags(row: WebsiteSetting | None) -> dict[str, bool]:
    """``has_<name>`` booleans for the admin view; secrets never leave the server."""
    return {
        f"has_{name}": bool(row and (getattr(row, column) or "").strip())
        for name, column in SECRET_FIELDS.items()
    }


def update_settings(values: dict, secrets: dict[str, str | None]) -> WebsiteSetting:
    """Create or update the settings row.

    Args:
        values: Plain fields, already validated (see ``PLAIN_FIELDS``).
        secrets: Credential name to new plaintext. An empty string clears the
            stored value; names absent from the mapping are left untouched.

    Returns:
        WebsiteSetting: The saved row. Saving fires ``post_save`` which
        drops cached payment-provider clients.
    """
    with transaction.atomic():
        row = WebsiteSetting.objects.select_for_update().order_by("id").first()
        if row is None:
            row = WebsiteSetting()
        for field in PLAIN_FIELDS:
            if field in values:
                setattr(row, field, values[field])
        for name, plain in secrets.items():
            column = SECRET_FIELDS[name]
            setattr(row, column, encrypt_secret(plain) if plain else None)
        row.save()
    logger.info("settings updated", extra={"secrets_changed": sorted(secrets)})
    return row
