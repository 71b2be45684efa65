"""Stripe and PayPal checkout flows against the in-process stub providers."""

import pytest

from apps.catalog.models import Product
from apps.orders.models import Order
from apps.payments.providers import get_stripe_provider

STRIPE_INTENT = "/api/stripe/create-payment-intent"
STRIPE_CONFIRM = "/api/stripe/confirm-order"
PAYPAL_CREATE = "/api/paypal/create-order"
PAYPAL_CAPTURE = "/api/paypal/capture-order"


@pytest.fixture
def mug(db):
    return Product.objects.create(slug="mug", title="Mug", price_cents=2500)


def cart(product, qty=2):
    return {"items": [{"productId": product.id, "qty": qty}]}


def checkout(product, qty=2, **extra):
    return {
        **cart(product, qty),
        "customer": {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com"},
        "shipping": {"address1": "1 rue de la Paix", "postal_code": "75002", "city": "Paris"},
        **extra,
    }


@pytest.mark.django_db
def test_create_payment_intent_prices_the_cart(api_client, mug):
    r = api_client.post(STRIPE_INTENT, cart(mug), format="json")
    assert r.status_code == 200
    body = r.json()
    assert body["amountCents"] == 5000
    assert body["currency"] == "EUR"
    assert body["clientSecret"] == f"{body['paymentIntentId']}_secret"


@pytest.mark.django_db
def test_create_payment_intent_rejects_empty_cart(api_client):
    r = api_client.post(STRIPE_INTENT, {"items": []}, format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "Cart is empty."}


@pytest.mark.django_db
def test_confirm_card_order_is_idempotent(api_client, mug):
    intent_id = api_client.post(STRIPE_INTENT, cart(mug), format="json").json()["paymentIntentId"]

    r = api_client.post(STRIPE_CONFIRM, checkout(mug, paymentIntentId=intent_id), format="json")
    assert r.status_code == 201
    body = r.json()
    assert body["ok"] is True and body["created"] is True
    assert body["order"]["status"] == "paid"

    order = Order.objects.get(public_id=body["order"]["public_id"])
    assert order.payment_status == "paid"
    assert order.paid_at is not None
    assert order.preferred_payment_method == "Stripe"
    assert (order.stripe_charge_id, order.stripe_risk_level, order.stripe_risk_score) == ("ch_stub_1", "normal", 12)

    r = api_client.post(STRIPE_CONFIRM, checkout(mug, paymentIntentId=intent_id), format="json")
    assert r.status_code == 200
    assert r.json()["created"] is False
    assert r.json()["order"]["public_id"] == order.public_id
    assert Order.objects.count() == 1


@pytest.mark.django_db
def test_confirm_rejects_unpaid_intent(api_client, mug):
    r = api_client.post(STRIPE_CONFIRM, checkout(mug, paymentIntentId="pi_unknown"), format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "Payment is not completed."}
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_confirm_rejects_a_cart_that_changed(api_client, mug):
    intent_id = api_client.post(STRIPE_INTENT, cart(mug, qty=1), format="json").json()["paymentIntentId"]
    r = api_client.post(STRIPE_CONFIRM, checkout(mug, qty=3, paymentIntentId=intent_id), format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "Payment amount does not match the order."}
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_confirm_requires_intent_id(api_client, mug):
    r = api_client.post(STRIPE_CONFIRM, checkout(mug), format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid payment."}


@pytest.mark.django_db
def test_create_payment_intent_records_amount_at_provider(api_client, mug):
    intent_id = api_client.post(STRIPE_INTENT, cart(mug, qty=3), format="json").json()["paymentIntentId"]
    assert get_stripe_provider().intents[intent_id].amount_cents == 7500


@pytest.mark.django_db
def test_paypal_create_and_capture(api_client, mug):
    r = api_client.post(PAYPAL_CREATE, cart(mug), format="json")
    assert r.status_code == 200
    paypal_order = r.json()["orderId"]
    assert r.json()["amountCents"] == 5000

    r = api_client.post(PAYPAL_CAPTURE, checkout(mug, orderId=paypal_order), format="json")
    assert r.status_code == 201
    order = Order.objects.get(public_id=r.json()["order"]["public_id"])
    assert order.paypal_order_id == paypal_order
    assert order.paypal_capture_id == f"CAP-{paypal_order}"
    assert order.preferred_payment_method == "PayPal"
    # contact details come from the checkout form, not the PayPal payer
    assert order.email == "ada@example.com"

    r = api_client.post(PAYPAL_CAPTURE, checkout(mug, orderId=paypal_order), format="json")
    assert r.status_code == 200
    assert Order.objects.count() == 1


@pytest.mark.django_db
def test_paypal_capture_not_completed(api_client, mug):
    r = api_client.post(PAYPAL_CAPTURE, checkout(mug, orderId="UNKNOWN"), format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "PayPal payment was not completed."}


@pytest.mark.django_db
def test_paypal_capture_rejects_a_cart_that_changed(api_client, mug):
    paypal_order = api_client.post(PAYPAL_CREATE, cart(mug, qty=1), format="json").json()["orderId"]
    r = api_client.post(PAYPAL_CAPTURE, checkout(mug, qty=50, orderId=paypal_order), format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "Payment amount does not match the order."}
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_paypal_capture_requires_order_id(api_client, mug):
    r = api_client.post(PAYPAL_CAPTURE, checkout(mug), format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "PayPal order id is missing."}
