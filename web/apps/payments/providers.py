"""Factories returning configured payment providers.

Provider clients are memoised per process in ``provider_cache``, keyed by a
SHA-256 fingerprint of the credentials they were built with. A settings
save clears the cache (see ``PaymentsConfig.ready``), and a changed key
produces a new fingerprint anyway, so a stale client is never reused.
"""

import hashlib
import logging
import threading

from django.conf import settings

from apps.common.errors import ConfigurationError
from apps.site_settings.services import get_secret, get_settings

from .adapters import PayPalStub, StripeStub
from .domain import CardPaymentProvider, PaymentProvider, PayPalPaymentProvider, provider_name_for
from .http_adapters import PayPalProvider, StripeProvider

logger = logging.getLogger(__name__)


def fingerprint(*parts: str) -> str:
    digest = hashlib.sha256()
    for part in parts:
        digest.update(part.encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()


class ProviderCache:
    """Thread-safe map of provider name to ``(fingerprint, client)``."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[str, object]] = {}

    def get_or_create(self, name: str, key: str, factory):
        with self._lock:
            entry = self._entries.get(name)
            if entry is not None and entry[0] == key:
                return entry[1]
            client = factory()
            self._entries[name] = (key, client)
            logger.info("payment client created", extra={"provider": name})
            return client

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self):
        return len(self._entries)


provider_cache = ProviderCache()


def drop_cached_clients(sender, **kwargs):
    """``post_save`` receiver for ``WebsiteSetting``."""
    provider_cache.clear()


def _use_http() -> bool:
    return getattr(settings, "USE_HTTP_ADAPTERS", True)


def get_stripe_provider() -> CardPaymentProvider:
    """Return the Stripe provider for the configured secret key.

    Raises:
        ConfigurationError: If no Stripe secret key is configured.
    """
    if not _use_http():
        return provider_cache.get_or_create("stripe", "stub", StripeStub)
    secret_key = get_secret("stripe_secret_key")
    if not secret_key:
        raise ConfigurationError("Missing Stripe secret key.")
    return provider_cache.get_or_create("stripe", fingerprint(secret_key), lambda: StripeProvider(secret_key))


def get_paypal_provider() -> PayPalPaymentProvider:
    """Return the PayPal provider for the configured client credentials.

    Raises:
        ConfigurationError: If the client id or secret is missing.
    """
    if not _use_http():
        return provider_cache.get_or_create("paypal", "stub", PayPalStub)
    row = get_settings()
    client_id = get_secret("paypal_client_id", row)
    client_secret = get_secret("paypal_client_secret", row)
    if not client_id or not client_secret:
        raise ConfigurationError("Missing PayPal API credentials.")
    return provider_cache.get_or_create(
        "paypal",
        fingerprint(client_id, client_secret, settings.PAYPAL_ENV),
        lambda: PayPalProvider(client_id, client_secret),
    )


def get_provider_for(method: str | None) -> PaymentProvider:
    """Pick the provider matching an order's ``preferred_payment_method``."""
    if provider_name_for(method) == "stripe":
        return get_stripe_provider()
    return get_paypal_provider()
