"""In-process stub payment providers.

Used when ``USE_HTTP_ADAPTERS`` is off. Each stub keeps the charges it
created and the refunds it accepted so tests can assert on them. Setting
``fail_refunds`` makes refunds fail the way a declined provider call would.
"""

import itertools

from .domain import (
    CardPayment,
    Charge,
    PaymentReference,
    PaymentReferenceMissing,
    PayPalCapture,
    RefundFailed,
)


class StripeStub:
    """Fake Stripe account; every PaymentIntent succeeds immediately."""

    name = "stripe"

    def __init__(self):
        self._ids = itertools.count(1)
        self.intents: dict[str, CardPayment] = {}
        self.refunds: list[tuple[str, int]] = []
        self.fail_refunds = False

    def create_charge(self, amount_cents, currency, metadata):
        n = next(self._ids)
        intent_id = f"pi_stub_{n}"
        self.intents[intent_id] = CardPayment(
            payment_intent_id=intent_id,
            status="succeeded",
            amount_cents=amount_cents,
            currency=currency.lower(),
            charge_id=f"ch_stub_{n}",
            risk_level="normal",
            risk_score=12,
            outcome_type="authorized",
            seller_message="Payment complete.",
        )
        return Charge(intent_id, amount_cents, currency, client_secret=f"{intent_id}_secret")

    def retrieve(self, payment_intent_id):
        payment = self.intents.get(payment_intent_id)
        if payment is None:
            return CardPayment(payment_intent_id, "requires_payment_method", 0, "eur")
        return payment

    def refund(self, reference: PaymentReference, amount_cents, currency):
        target = reference.payment_intent_id or reference.charge_id
        if not target:
            raise PaymentReferenceMissing("Stripe payment not found for this order.")
        if self.fail_refunds:
            raise RefundFailed()
        self.refunds.append((target, amount_cents))
        return f"re_stub_{len(self.refunds)}"


class PayPalStub:
    """Fake PayPal account; captures complete with a fixed payer."""

    name = "paypal"

    def __init__(self):
        self._ids = itertools.count(1)
        self.orders: dict[str, tuple[int, str]] = {}
        self.refunds: list[tuple[str, int]] = []
        self.fail_refunds = False

    def create_charge(self, amount_cents, currency, metadata):
        order_id = f"PAYPAL-STUB-{next(self._ids)}"
        self.orders[order_id] = (amount_cents, currency.upper())
        return Charge(order_id, amount_cents, currency)

    def capture(self, order_id):
        if order_id not in self.orders:
            return PayPalCapture(order_id, "DECLINED", None)
        amount_cents, currency = self.orders[order_id]
        return PayPalCapture(
            order_id,
            "COMPLETED",
            f"CAP-{order_id}",
            payer={"email": "buyer@paypal.test", "first_name": "Paula", "last_name": "Payer"},
            amount_cents=amount_cents,
            currency=currency,
        )

    def refund(self, reference: PaymentReference, amount_cents, currency):
        if not reference.capture_id:
            raise PaymentReferenceMissing("PayPal payment not found for this order.")
        if self.fail_refunds:
            raise RefundFailed("PayPal refund failed.")
        self.refunds.append((reference.capture_id, amount_cents))
        return f"REF-{len(self.refunds)}"
