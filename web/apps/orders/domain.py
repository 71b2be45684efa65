"""Domain types, ports and services for orders and checkout pricing.

This module holds the order state machine, the pricing aggregator and the
``CheckoutPricer`` that turns a cart into a priced snapshot. Persistence is
reached only through the ``ProductLookup`` port and the shipping/discount
domain services, so the pricing rules can be unit tested with stubs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from apps.common.errors import InvalidInput, NotFound
from apps.discounts.domain import DiscountEvaluator, DiscountResult, normalize_code
from apps.shipping.domain import ShippingResolver, ShippingSelection


# ---- Enums ----
class OrderStatus(str, Enum):
    """Fulfilment lifecycle of an order."""

    PENDING_PAYMENT = "pending_payment"
    PAYMENT_LINK_SENT = "payment_link_sent"
    PAID = "paid"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Money axis of an order, independent of fulfilment."""

    UNPAID = "unpaid"
    PAID = "paid"
    PARTIALLY_REFUNDED = "partially_refunded"
    REFUNDED = "refunded"


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING_PAYMENT: frozenset(
        {OrderStatus.PAYMENT_LINK_SENT, OrderStatus.PAID, OrderStatus.CANCELLED}
    ),
    OrderStatus.PAYMENT_LINK_SENT: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.FULFILLED}),
    OrderStatus.FULFILLED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

REFUNDABLE_STATUSES = frozenset({OrderStatus.PAID, OrderStatus.FULFILLED})


# ---- Errors ----
class OrderNotFound(NotFound):
    default_message = "Order not found."


class InvalidTotal(InvalidInput):
    default_message = "Invalid total."


class InvalidStatusTransition(InvalidInput):
    default_message = "Invalid status transition."


class ItemsUnavailable(InvalidInput):
    default_message = "Some items are unavailable."


class EmptyCart(InvalidInput):
    default_message = "Cart is empty."


class CustomerNotFound(NotFound):
    default_message = "Customer not found."


class DuplicateCustomerEmail(InvalidInput):
    default_message = "A customer with this email already exists."


# ---- Entities / DTOs ----
@dataclass(frozen=True)
class CartLine:
    product_id: int
    qty: int


@dataclass(frozen=True)
class ProductSnapshot:
    """Price and title of an active product at pricing time."""

    id: int
    title: str
    price_cents: int


@dataclass(frozen=True)
class PricedLine:
    product: ProductSnapshot
    qty: int

    @property
    def line_total_cents(self) -> int:
        return self.product.price_cents * self.qty


@dataclass(frozen=True)
class PricedCheckout:
    """Result of pricing a cart.

    Attributes:
        lines: One entry per distinct product, in first-seen order.
        subtotal_cents: Sum of the line totals.
        shipping: Selected option (or None for the default) and its cost.
        discount: Matched discount and its reduction, or None.
        total_cents: ``subtotal + shipping - discount``, always > 0.
    """

    lines: list[PricedLine]
    subtotal_cents: int
    shipping: ShippingSelection
    discount: DiscountResult | None
    total_cents: int

    @property
    def shipping_cents(self) -> int:
        return self.shipping.shipping_cents

    @property
    def discount_cents(self) -> int:
        return self.discount.discount_cents if self.discount else 0

    @property
    def discount_code(self) -> str | None:
        return self.discount.discount.code if self.discount else None


# ---- Ports ----
class ProductLookup(Protocol):
    def active_by_ids(self, product_ids: list[int]) -> dict[int, ProductSnapshot]:
        """Return the active products among ``product_ids`` keyed by id."""
        raise NotImplementedError()


# ---- Pure rules ----
def aggregate(subtotal_cents: int, shipping_cents: int, discount_cents: int) -> int:
    """Combine the three amounts into the charge total.

    Raises:
        InvalidTotal: If the total is zero or negative.
    """
    total = int(subtotal_cents) + int(shipping_cents) - int(discount_cents)
    if total <= 0:
        raise InvalidTotal()
    return total


def check_transition(current: str, target: str) -> bool:
    """Validate an admin status change.

    Returns:
        bool: False when ``target`` equals ``current`` (nothing to do),
        True when the transition is allowed.

    Raises:
        InvalidStatusTransition: For any transition outside the graph.
    """
    try:
        current_status, target_status = OrderStatus(current), OrderStatus(target)
    except ValueError:
        raise InvalidStatusTransition()
    if current_status == target_status:
        return False
    if target_status not in ALLOWED_TRANSITIONS[current_status]:
        raise InvalidStatusTransition(
            f"Cannot change status from {current_status.value} to {target_status.value}."
        )
    return True


def payment_status_after_refund(total_cents: int, refunded_cents: int) -> PaymentStatus:
    if refunded_cents >= total_cents:
        return PaymentStatus.REFUNDED
    return PaymentStatus.PARTIALLY_REFUNDED


def merge_lines(lines: list[CartLine]) -> list[CartLine]:
    """Sum quantities of repeated products, keeping first-seen order."""
    merged: dict[int, int] = {}
    for line in lines:
        merged[line.product_id] = merged.get(line.product_id, 0) + line.qty
    return [CartLine(pid, qty) for pid, qty in merged.items()]


# ---- Domain service ----
class CheckoutPricer:
    """Price a cart: subtotal, shipping, discount, total.

    The discount applies to ``subtotal + shipping``, so a 10% code on a
    5000 cent cart shipped for 490 cents takes off 549 cents.
    """

    def __init__(
        self,
        products: ProductLookup,
        shipping: ShippingResolver,
        discounts: DiscountEvaluator,
        default_shipping_cents: int = 0,
    ):
        self.products = products
        self.shipping = shipping
        self.discounts = discounts
        self.default_shipping_cents = default_shipping_cents

    def price(
        self,
        lines: list[CartLine],
        shipping_option_id: int | None = None,
        discount_code: str | None = None,
    ) -> PricedCheckout:
        """Compute a ``PricedCheckout`` for ``lines``.

        Args:
            lines: Cart lines; repeated products are merged.
            shipping_option_id: Option picked by the customer, if any.
            discount_code: Raw code typed by the customer, if any.

        Raises:
            EmptyCart: If ``lines`` is empty.
            ItemsUnavailable: If a product is unknown or inactive.
            ShippingOptionNotFound, InvalidShippingPrice, ShippingNotApplicable:
                From the shipping resolver.
            DiscountNotFound, InvalidDiscountAmount, InvalidDiscountPercent:
                From the discount evaluator.
            InvalidTotal: If the resulting total is not positive.
        """
        merged = merge_lines(lines)
        if not merged:
            raise EmptyCart()

        found = self.products.active_by_ids([line.product_id for line in merged])
        if len(found) != len(merged):
            raise ItemsUnavailable()

        priced = [PricedLine(found[line.product_id], line.qty) for line in merged]
        subtotal = sum(p.line_total_cents for p in priced)

        selection = self.shipping.resolve(shipping_option_id, subtotal, self.default_shipping_cents)

        discount = None
        if normalize_code(discount_code):
            discount = self.discounts.evaluate(discount_code, subtotal + selection.shipping_cents)

        total = aggregate(subtotal, selection.shipping_cents, discount.discount_cents if discount else 0)
        return PricedCheckout(priced, subtotal, selection, discount, total)
