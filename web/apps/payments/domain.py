"""Domain types and ports for card (Stripe) and PayPal payments.

Providers translate an amount in cents into a provider request and
translate provider failures into the errors below. They never touch the
database; ``services.RefundService`` owns the order update.
"""

from dataclasses import dataclass, field
from typing import Protocol

from apps.common.errors import InvalidInput, UpstreamError


# ---- Errors ----
class PaymentFailed(UpstreamError):
    default_message = "Payment provider error."


class RefundFailed(UpstreamError):
    default_message = "Refund failed."


class UnsupportedPaymentMethod(InvalidInput):
    default_message = "Unsupported payment method."


class InvalidRefundAmount(InvalidInput):
    default_message = "Invalid refund amount."


class OrderNotPaid(InvalidInput):
    default_message = "Order is not paid."


class PaymentReferenceMissing(InvalidInput):
    default_message = "Payment reference is missing for this order."


class PaymentNotCompleted(InvalidInput):
    default_message = "Payment is not completed."


class PaymentAmountMismatch(InvalidInput):
    default_message = "Payment amount does not match the order."


# ---- Entities / DTOs ----
@dataclass(frozen=True)
class Charge:
    """A payment created at the provider, not yet confirmed.

    Attributes:
        reference: PaymentIntent id (Stripe) or order id (PayPal).
        client_secret: Stripe client secret handed to the browser.
    """

    reference: str
    amount_cents: int
    currency: str
    client_secret: str | None = None


@dataclass(frozen=True)
class PaymentReference:
    """Provider identifiers stored on an order, used for refunds."""

    payment_intent_id: str | None = None
    charge_id: str | None = None
    capture_id: str | None = None


@dataclass(frozen=True)
class CardPayment:
    """State of a Stripe PaymentIntent after the customer paid."""

    payment_intent_id: str
    status: str
    amount_cents: int
    currency: str
    charge_id: str | None = None
    risk_level: str | None = None
    risk_score: int | None = None
    outcome_type: str | None = None
    seller_message: str | None = None


@dataclass(frozen=True)
class PayPalCapture:
    order_id: str
    status: str
    capture_id: str | None
    payer: dict = field(default_factory=dict)
    amount_cents: int | None = None
    currency: str | None = None


# ---- Ports ----
class PaymentProvider(Protocol):
    """Capability set shared by every payment provider."""

    name: str

    def create_charge(self, amount_cents: int, currency: str, metadata: dict) -> Charge:
        """Create a payment for ``amount_cents`` at the provider."""
        raise NotImplementedError()

    def refund(self, reference: PaymentReference, amount_cents: int, currency: str) -> str:
        """Refund ``amount_cents`` and return the provider refund id.

        Raises:
            PaymentReferenceMissing: If ``reference`` lacks the id this
                provider needs.
            RefundFailed: If the provider rejects the refund.
        """
        raise NotImplementedError()


class CardPaymentProvider(PaymentProvider, Protocol):
    def retrieve(self, payment_intent_id: str) -> CardPayment:
        raise NotImplementedError()


class PayPalPaymentProvider(PaymentProvider, Protocol):
    def capture(self, order_id: str) -> PayPalCapture:
        raise NotImplementedError()


def provider_name_for(method: str | None) -> str:
    """Map a free-text payment method ("Stripe", "paypal") to a provider name.

    Raises:
        UnsupportedPaymentMethod: For anything that is neither Stripe nor PayPal.
    """
    lowered = (method or "").lower()
    if "stripe" in lowered:
        return "stripe"
    if "paypal" in lowered:
        return "paypal"
    raise UnsupportedPaymentMethod()


def check_refund_amount(amount_cents: int, total_cents: int, refunded_cents: int) -> int:
    """Return the remaining refundable amount after validating the request.

    Raises:
        InvalidRefundAmount: Unless ``0 < amount_cents <= total - refunded``.
    """
    remaining = max(total_cents - refunded_cents, 0)
    if amount_cents <= 0 or amount_cents > remaining:
        raise InvalidRefundAmount()
    return remaining
