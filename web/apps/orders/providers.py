"""Factory helpers wiring the checkout pricer with its ports."""

import logging

from django.conf import settings

from apps.discounts.domain import DiscountEvaluator
from apps.discounts.repository import DiscountRepository
from apps.shipping.providers import get_shipping_resolver

from .domain import CheckoutPricer
from .repository import ProductRepository

logger = logging.getLogger(__name__)


def default_shipping_cents() -> int:
    """``SHIPPING_CENTS`` as a non-negative int; anything else means 0."""
    raw = getattr(settings, "SHIPPING_CENTS", 0)
    try:
        cents = int(str(raw).strip())
    except (TypeError, ValueError):
        logger.warning("invalid SHIPPING_CENTS, using 0", extra={"value": str(raw)})
        return 0
    return max(cents, 0)


def get_checkout_pricer() -> CheckoutPricer:
    return CheckoutPricer(
        products=ProductRepository(),
        shipping=get_shipping_resolver(),
        discounts=DiscountEvaluator(DiscountRepository()),
        default_shipping_cents=default_shipping_cents(),
    )
