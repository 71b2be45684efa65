"""Domain types, port and resolver for shipping options.

The resolver answers one question for checkout: given the option the
customer picked (if any) and the cart subtotal, how many cents of shipping
should be charged?
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from apps.common.errors import InvalidInput, NotFound
from apps.common.money import parse_money_to_cents


class ShippingType(str, Enum):
    SHIPPING = "shipping"
    CLICKNCOLLECT = "clickncollect"
    SERVICE_POINTS = "service_points"


# ---- Errors ----
class ShippingOptionNotFound(NotFound):
    default_message = "Shipping option not found."


class InvalidShippingPrice(InvalidInput):
    default_message = "Shipping price is invalid."


class ShippingNotApplicable(InvalidInput):
    default_message = "Shipping option not available for this order."


# ---- Entities / DTOs ----
@dataclass(frozen=True)
class ShippingOptionInfo:
    """Read-only view of a persisted shipping option.

    Attributes:
        price: Decimal string as stored ("4.90").
        min_order_total: Optional inclusive lower bound, decimal string.
        max_order_total: Optional inclusive upper bound, decimal string.
    """

    id: int
    carrier: str
    shipping_type: ShippingType
    title: str
    price: str
    min_order_total: str | None = None
    max_order_total: str | None = None


@dataclass(frozen=True)
class ShippingSelection:
    option: ShippingOptionInfo | None
    shipping_cents: int


# ---- Ports ----
class ShippingOptionLookup(Protocol):
    def get(self, option_id: int) -> ShippingOptionInfo | None:
        """Return the option with primary key ``option_id``, or None."""
        raise NotImplementedError()


def is_within_order_total(option, subtotal_cents: int) -> bool:
    """True when ``subtotal_cents`` sits inside the option's inclusive bounds.

    Accepts anything with ``min_order_total``/``max_order_total`` attributes
    (domain snapshot or model instance). Unparseable bounds are ignored.
    """
    min_cents = parse_money_to_cents(option.min_order_total)
    max_cents = parse_money_to_cents(option.max_order_total)
    if min_cents is not None and subtotal_cents < min_cents:
        return False
    if max_cents is not None and subtotal_cents > max_cents:
        return False
    return True


# ---- Domain service ----
class ShippingResolver:
    """Resolve the shipping cost of a checkout."""

    def __init__(self, lookup: ShippingOptionLookup):
        self.lookup = lookup

    def resolve(self, option_id: int | None, subtotal_cents: int, default_shipping_cents: int) -> ShippingSelection:
        """Return the selected option and its price in cents.

        Args:
            option_id: Identifier chosen by the customer. None, zero or a
                negative value means "no explicit choice".
            subtotal_cents: Cart subtotal used to check the option bounds.
            default_shipping_cents: Cost charged when no option is chosen.

        Returns:
            ShippingSelection: ``option`` is None when the default applies.
            ``shipping_cents`` is always a non-negative integer.

        Raises:
            ShippingOptionNotFound: If ``option_id`` matches no option.
            InvalidShippingPrice: If the stored price cannot be parsed.
            ShippingNotApplicable: If the subtotal is outside the bounds.
        """
        if not option_id or option_id <= 0:
            return ShippingSelection(None, max(int(default_shipping_cents), 0))

        option = self.lookup.get(option_id)
        if option is None:
            raise ShippingOptionNotFound()

        shipping_cents = parse_money_to_cents(option.price)
        if shipping_cents is None:
            raise InvalidShippingPrice()

        if not is_within_order_total(option, subtotal_cents):
            raise ShippingNotApplicable()

        return ShippingSelection(option, shipping_cents)


_DELIVERY_STATUS_RULES = (
    (("DELIVERED",), "Delivered"),
    (("READY_TO_SEND",), "Label created"),
    (("READY_FOR_PICKUP", "AT_SERVICE_POINT"), "Ready for pickup"),
    (("OUT_FOR_DELIVERY", "IN_TRANSIT"), "In transit"),
    (("PICKED_UP",), "Picked up"),
    (("FAILED_DELIVERY", "DELIVERY_ATTEMPT"), "Delivery attempt failed"),
    (("ANNOUNCEMENT_FAILED",), "Announcement failed"),
    (("EXCEPTION",), "Exception"),
    (("RETURN",), "Returning"),
    (("CANCEL",), "Cancelled"),
)


def format_delivery_status(raw: str | None) -> str | None:
    """Map a carrier parcel status to a short human label.

    Unknown statuses are returned unchanged; blank input gives None.
    """
    if not raw or not raw.strip():
        return None
    upper = raw.upper()
    for needles, label in _DELIVERY_STATUS_RULES:
        if any(n in upper for n in needles):
            return label
    return raw.strip()


# ---- Carrier integration ----
class CarrierError(InvalidInput):
    """Carrier-side rejection the admin can act on (missing keys, sender)."""

    default_message = "Shipping carrier request was rejected."


class CarrierKeysMissing(CarrierError):
    default_message = "Sendcloud keys are missing."


class SenderAddressMissing(CarrierError):
    default_message = "Sender address is missing in Sendcloud. Configure one in your Sendcloud account."


@dataclass(frozen=True)
class Shipment:
    """Outcome of announcing a parcel to the carrier."""

    shipment_id: str | None
    parcel_id: int | None
    label_url: str | None
    tracking_number: str | None
    tracking_url: str | None
    delivery_status: str | None


class CarrierPort(Protocol):
    """Port describing the shipping-carrier operations the back office uses."""

    def quote(self, to_country: str, to_postal_code: str, carrier_code: str, weight_kg) -> list[dict]:
        raise NotImplementedError()

    def carriers(self) -> list[str]:
        raise NotImplementedError()

    def service_points(self, country: str, address: str, postal_code: str, city: str, carrier: str = "") -> list[dict]:
        raise NotImplementedError()

    def sender_address(self) -> dict | None:
        raise NotImplementedError()

    def announce_shipment(self, payload: dict) -> Shipment:
        raise NotImplementedError()

    def download_label(self, url: str) -> tuple[bytes, str]:
        raise NotImplementedError()
