"""Refund tests: amount guard, payment status and provider failures.

The order row must be unchanged whenever a refund is rejected, whether the
guard refuses it or the provider does.
"""

import pytest

from apps.orders.models import Order
from apps.payments.domain import InvalidRefundAmount, check_refund_amount
from apps.payments.providers import get_paypal_provider, get_stripe_provider
from apps.payments.services import RefundService

ADMIN_ORDERS = "/api/admin/orders"


def paid_order(**overrides) -> Order:
    values = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "address1": "1 rue de la Paix",
        "postal_code": "75002",
        "city": "Paris",
        "country": "FR",
        "preferred_payment_method": "Stripe",
        "status": "paid",
        "payment_status": "paid",
        "subtotal_cents": 9510,
        "shipping_cents": 490,
        "discount_cents": 0,
        "total_cents": 10000,
        "stripe_payment_intent_id": "pi_123",
    }
    values.update(overrides)
    return Order.objects.create(**values)


def refund(client, order, amount):
    return client.post(f"{ADMIN_ORDERS}/{order.public_id}/refund", {"amountCents": amount}, format="json")


def snapshot(order):
    row = Order.objects.get(pk=order.pk)
    return row.refunded_cents, row.payment_status


@pytest.mark.django_db
def test_full_refund(admin_client):
    order = paid_order()
    r = refund(admin_client, order, 10000)
    assert r.status_code == 200
    assert r.json() == {"ok": True, "refunded_cents": 10000, "payment_status": "refunded"}
    assert get_stripe_provider().refunds == [("pi_123", 10000)]


@pytest.mark.django_db
def test_refund_above_total_changes_nothing(admin_client):
    order = paid_order()
    r = refund(admin_client, order, 10001)
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid refund amount."}
    assert snapshot(order) == (0, "paid")
    assert get_stripe_provider().refunds == []


@pytest.mark.django_db
def test_partial_refunds_accumulate(admin_client):
    order = paid_order()
    assert refund(admin_client, order, 2500).json()["payment_status"] == "partially_refunded"
    r = refund(admin_client, order, 7500)
    assert r.json()["refunded_cents"] == 10000
    assert r.json()["payment_status"] == "refunded"

    r = refund(admin_client, order, 1)
    assert r.status_code == 400
    assert snapshot(order) == (10000, "refunded")


@pytest.mark.django_db
@pytest.mark.parametrize("amount", [0, -5, "abc", True])
def test_refund_rejects_bad_amounts(admin_client, amount):
    order = paid_order()
    r = refund(admin_client, order, amount)
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid refund amount."}


@pytest.mark.django_db
def test_unpaid_order_cannot_be_refunded(admin_client):
    order = paid_order(status="pending_payment", payment_status="unpaid")
    r = refund(admin_client, order, 100)
    assert r.status_code == 400
    assert r.json() == {"error": "Order is not paid."}


@pytest.mark.django_db
def test_provider_failure_leaves_order_untouched(admin_client):
    order = paid_order()
    get_stripe_provider().fail_refunds = True
    r = refund(admin_client, order, 5000)
    assert r.status_code == 502
    assert r.json() == {"error": "Refund failed."}
    assert snapshot(order) == (0, "paid")


@pytest.mark.django_db
def test_paypal_refund_uses_capture_id(admin_client):
    order = paid_order(preferred_payment_method="PayPal", stripe_payment_intent_id=None, paypal_capture_id="CAP-9")
    r = refund(admin_client, order, 4000)
    assert r.status_code == 200
    assert get_paypal_provider().refunds == [("CAP-9", 4000)]


@pytest.mark.django_db
def test_paypal_refund_without_capture_id(admin_client):
    order = paid_order(preferred_payment_method="PayPal", stripe_payment_intent_id=None)
    r = refund(admin_client, order, 4000)
    assert r.status_code == 400
    assert r.json() == {"error": "PayPal payment not found for this order."}
    assert snapshot(order) == (0, "paid")


@pytest.mark.django_db
def test_manual_payment_method_is_not_refundable(admin_client):
    order = paid_order(preferred_payment_method="Bank transfer")
    r = refund(admin_client, order, 100)
    assert r.status_code == 400
    assert r.json() == {"error": "Unsupported payment method."}


@pytest.mark.django_db
def test_refund_unknown_order(admin_client):
    r = admin_client.post(f"{ADMIN_ORDERS}/missing/refund", {"amountCents": 1}, format="json")
    assert r.status_code == 404


@pytest.mark.django_db
def test_refund_service_with_injected_provider():
    order = paid_order()
    calls = []

    class Recorder:
        name = "recorder"

        def refund(self, reference, amount_cents, currency):
            calls.append((reference.payment_intent_id, amount_cents, currency))
            return "re_1"

    out = RefundService(provider_for=lambda method: Recorder(), currency="EUR").refund(order.public_id, 300)
    assert out.refunded_cents == 300
    assert calls == [("pi_123", 300, "EUR")]


def test_check_refund_amount():
    assert check_refund_amount(100, 1000, 400) == 600
    with pytest.raises(InvalidRefundAmount):
        check_refund_amount(601, 1000, 400)
    with pytest.raises(InvalidRefundAmount):
        check_refund_amount(0, 1000, 0)
