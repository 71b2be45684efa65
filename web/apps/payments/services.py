"""Refunds and provider-confirmed order creation.

Refund flow: the order row is locked, the amount guard is checked against
the locked values, the provider is called, and only after it confirms the
refund are ``refunded_cents`` and ``payment_status`` updated. A provider
failure raises before anything is written, so the transaction rolls back
with no state change.
"""

import logging

from django.conf import settings
from django.db import IntegrityError, transaction

from apps.orders.domain import (
    REFUNDABLE_STATUSES,
    OrderNotFound,
    OrderStatus,
    PaymentStatus,
    PricedCheckout,
    payment_status_after_refund,
)
from apps.orders.models import Order
from apps.orders.schemas import CheckoutDTO
from apps.orders.services import place_order

from .domain import (
    OrderNotPaid,
    PaymentAmountMismatch,
    PaymentNotCompleted,
    PaymentReference,
    check_refund_amount,
)
from .providers import get_paypal_provider, get_provider_for, get_stripe_provider

logger = logging.getLogger(__name__)


def payment_reference(order: Order) -> PaymentReference:
    return PaymentReference(
        payment_intent_id=order.stripe_payment_intent_id or None,
        charge_id=order.stripe_charge_id or None,
        capture_id=order.paypal_capture_id or None,
    )


class RefundService:
    """Refund part or all of a paid order through its payment provider."""

    def __init__(self, provider_for=get_provider_for, currency: str | None = None):
        self.provider_for = provider_for
        self.currency = currency or settings.STORE_CURRENCY

    def refund(self, public_id: str, amount_cents: int) -> Order:
        """Refund ``amount_cents`` on the order ``public_id``.

        Args:
            public_id: Public identifier of the order.
            amount_cents: Amount to give back, ``0 < amount <= remaining``.

        Returns:
            Order: The updated row.

        Raises:
            OrderNotFound: Unknown order.
            OrderNotPaid: Order is neither paid nor fulfilled.
            InvalidRefundAmount: Amount outside ``(0, remaining]``.
            UnsupportedPaymentMethod: Order was not paid by Stripe or PayPal.
            PaymentReferenceMissing: The provider id is missing on the order.
            RefundFailed: The provider rejected the refund.
        """
        with transaction.atomic():
            order = Order.objects.select_for_update().filter(public_id=public_id).first()
            if order is None:
                raise OrderNotFound()
            if order.status not in {s.value for s in REFUNDABLE_STATUSES}:
                raise OrderNotPaid()
            check_refund_amount(amount_cents, order.total_cents, order.refunded_cents)

            provider = self.provider_for(order.preferred_payment_method)
            refund_id = provider.refund(payment_reference(order), amount_cents, self.currency)

            order.refunded_cents += amount_cents
            order.payment_status = payment_status_after_refund(order.total_cents, order.refunded_cents).value
            order.save(update_fields=["refunded_cents", "payment_status", "updated_at"])

        logger.info(
            "order refunded",
            extra={
                "order": public_id,
                "provider": provider.name,
                "refund": refund_id,
                "amount_cents": amount_cents,
                "payment_status": order.payment_status,
            },
        )
        return order


def get_refund_service() -> RefundService:
    return RefundService()


def _existing(**lookup) -> Order | None:
    return Order.objects.filter(**lookup).first()


def _place_once(lookup: dict, create):
    """Create the order unless one already exists for the provider id.

    The provider id columns are unique, so a concurrent duplicate fails on
    insert and the winner's row is returned instead.
    """
    order = _existing(**lookup)
    if order is not None:
        return order, False
    try:
        return create(), True
    except IntegrityError:
        order = _existing(**lookup)
        if order is None:
            raise
        return order, False


def confirm_card_payment(checkout: CheckoutDTO, priced: PricedCheckout, payment_intent_id: str) -> tuple[Order, bool]:
    """Create a paid order for a succeeded PaymentIntent, once per intent.

    Returns:
        tuple[Order, bool]: The order and whether it was created now.

    Raises:
        PaymentNotCompleted: The intent has not succeeded.
        PaymentAmountMismatch: Intent amount or currency differs from the cart.
    """
    existing = _existing(stripe_payment_intent_id=payment_intent_id)
    if existing is not None:
        return existing, False

    payment = get_stripe_provider().retrieve(payment_intent_id)
    if payment.status != "succeeded":
        raise PaymentNotCompleted()
    if payment.amount_cents != priced.total_cents or payment.currency.lower() != settings.STORE_CURRENCY.lower():
        logger.warning(
            "stripe amount mismatch",
            extra={"intent": payment_intent_id, "amount_cents": payment.amount_cents, "expected": priced.total_cents},
        )
        raise PaymentAmountMismatch()

    def create():
        return place_order(
            checkout,
            priced,
            status=OrderStatus.PAID,
            payment_status=PaymentStatus.PAID,
            stripe_payment_intent_id=payment.payment_intent_id,
            stripe_charge_id=payment.charge_id,
            stripe_risk_level=payment.risk_level,
            stripe_risk_score=payment.risk_score,
            stripe_outcome_type=payment.outcome_type,
            stripe_seller_message=payment.seller_message,
        )

    return _place_once({"stripe_payment_intent_id": payment_intent_id}, create)


def capture_paypal_order(checkout: CheckoutDTO, priced: PricedCheckout, paypal_order_id: str) -> tuple[Order, bool]:
    """Capture a PayPal order and create the matching paid order, once.

    Raises:
        PaymentNotCompleted: PayPal did not report the capture as COMPLETED.
        PaymentAmountMismatch: Captured amount or currency differs from the cart.
    """
    existing = _existing(paypal_order_id=paypal_order_id)
    if existing is not None:
        return existing, False

    capture = get_paypal_provider().capture(paypal_order_id)
    if capture.status != "COMPLETED":
        raise PaymentNotCompleted("PayPal payment was not completed.")
    currency = (capture.currency or "").lower()
    if capture.amount_cents != priced.total_cents or currency != settings.STORE_CURRENCY.lower():
        logger.warning(
            "paypal amount mismatch",
            extra={
                "paypal_order": paypal_order_id,
                "amount_cents": capture.amount_cents,
                "expected": priced.total_cents,
            },
        )
        raise PaymentAmountMismatch()

    def create():
        return place_order(
            checkout,
            priced,
            status=OrderStatus.PAID,
            payment_status=PaymentStatus.PAID,
            paypal_order_id=paypal_order_id,
            paypal_capture_id=capture.capture_id,
        )

    return _place_once({"paypal_order_id": paypal_order_id}, create)
