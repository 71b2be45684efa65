"""Factories wiring the shipping ports to their implementations."""

from django.conf import settings

from apps.site_settings.services import get_secret, get_settings

from .adapters import SendcloudStub
from .domain import CarrierKeysMissing, CarrierPort, ShippingResolver
from .http_adapters import SendcloudClient
from .repository import ShippingOptionRepository


def get_shipping_resolver() -> ShippingResolver:
    return ShippingResolver(ShippingOptionRepository())


def sendcloud_keys() -> tuple[str, str]:
    row = get_settings()
    return get_secret("sendcloud_public_key", row), get_secret("sendcloud_private_key", row)


def get_carrier_client(public_only: bool = False) -> CarrierPort:
    """Return a Sendcloud client built from the stored key pair.

    Keys are required in both modes so that a missing configuration is
    reported the same way in tests and in production.

    Args:
        public_only: The service-point API only needs the public key.

    Raises:
        CarrierKeysMissing: If a required Sendcloud key is not configured.
    """
    public_key, private_key = sendcloud_keys()
    if not public_key:
        raise CarrierKeysMissing("Sendcloud key is missing." if public_only else None)
    if not private_key and not public_only:
        raise CarrierKeysMissing()
    if getattr(settings, "USE_HTTP_ADAPTERS", True):
        return SendcloudClient(public_key, private_key)
    return SendcloudStub()
