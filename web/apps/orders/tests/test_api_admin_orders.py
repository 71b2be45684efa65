"""API tests for the order back office: listing, status changes, tags."""

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from apps.orders.models import Order, OrderItem, OrderTag

ADMIN_ORDERS = "/api/admin/orders"
ORDER_TAGS = "/api/admin/order-tags"


def make_order(**overrides) -> Order:
    values = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "address1": "1 rue de la Paix",
        "postal_code": "75002",
        "city": "Paris",
        "country": "FR",
        "preferred_payment_method": "Bank transfer",
        "subtotal_cents": 5000,
        "shipping_cents": 490,
        "discount_cents": 0,
        "total_cents": 5490,
    }
    values.update(overrides)
    order = Order.objects.create(**values)
    OrderItem.objects.create(order=order, title_snapshot="Mug", unit_price_cents_snapshot=2500, qty=2)
    return order


@pytest.fixture
def order(db):
    return make_order()


@pytest.mark.django_db
def test_admin_endpoints_require_an_admin(api_client, order):
    assert api_client.get(ADMIN_ORDERS).status_code == 401

    outsider = get_user_model().objects.create_user(username="bob", email="bob@shop.test", password="pw")
    client = APIClient()
    client.force_authenticate(user=outsider)
    r = client.patch(f"{ADMIN_ORDERS}/{order.public_id}", {"status": "paid"}, format="json")
    assert r.status_code == 403
    assert Order.objects.get(pk=order.pk).status == "pending_payment"


@pytest.mark.django_db
def test_list_orders_with_status_filter(admin_client):
    make_order()
    paid = make_order(status="paid", payment_status="paid")

    r = admin_client.get(ADMIN_ORDERS, {"status": "paid"})
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 1
    assert [o["public_id"] for o in body["orders"]] == [paid.public_id]
    assert body["orders"][0]["items_count"] == 1

    assert admin_client.get(ADMIN_ORDERS).json()["total"] == 2


@pytest.mark.django_db
def test_list_orders_rejects_unknown_status(admin_client):
    r = admin_client.get(ADMIN_ORDERS, {"status": "shipped"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid status."}


@pytest.mark.django_db
def test_order_detail(admin_client, order):
    r = admin_client.get(f"{ADMIN_ORDERS}/{order.public_id}")
    assert r.status_code == 200
    detail = r.json()["order"]
    assert detail["email"] == "ada@example.com"
    assert detail["address1"] == "1 rue de la Paix"
    assert detail["items"][0]["qty"] == 2


@pytest.mark.django_db
def test_mark_paid_stamps_paid_at_once(admin_client, order):
    r = admin_client.patch(f"{ADMIN_ORDERS}/{order.public_id}", {"status": "paid"}, format="json")
    assert r.status_code == 200
    assert r.json()["order"]["status"] == "paid"
    order.refresh_from_db()
    assert order.payment_status == "paid"
    first_paid_at = order.paid_at
    assert first_paid_at is not None

    # same status is a no-op
    r = admin_client.patch(f"{ADMIN_ORDERS}/{order.public_id}", {"status": "paid"}, format="json")
    assert r.status_code == 200
    order.refresh_from_db()
    assert order.paid_at == first_paid_at


@pytest.mark.django_db
def test_illegal_transition_is_rejected(admin_client):
    order = make_order(status="fulfilled", payment_status="paid")
    r = admin_client.patch(f"{ADMIN_ORDERS}/{order.public_id}", {"status": "pending_payment"}, format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "Cannot change status from fulfilled to pending_payment."}


@pytest.mark.django_db
def test_patch_rejects_unknown_status(admin_client, order):
    r = admin_client.patch(f"{ADMIN_ORDERS}/{order.public_id}", {"status": "lost"}, format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid status."}


@pytest.mark.django_db
def test_patch_unknown_order(admin_client):
    r = admin_client.patch(f"{ADMIN_ORDERS}/nope", {"status": "paid"}, format="json")
    assert r.status_code == 404


@pytest.mark.django_db
def test_replace_order_tags(admin_client, order):
    OrderTag.objects.create(name="VIP")
    url = f"{ADMIN_ORDERS}/{order.public_id}/tags"

    r = admin_client.put(url, {"tags": ["vip", "gift", "Gift", " fragile "]}, format="json")
    assert r.status_code == 200
    assert r.json() == {"tags": ["VIP", "fragile", "gift"]}
    assert OrderTag.objects.count() == 3

    r = admin_client.put(url, {"tags": ["gift"]}, format="json")
    assert r.json() == {"tags": ["gift"]}
    assert admin_client.get(url).json() == {"tags": ["gift"]}
    # tags are never deleted by reassignment
    assert OrderTag.objects.count() == 3


@pytest.mark.django_db
def test_replace_order_tags_rejects_blank(admin_client, order):
    r = admin_client.put(f"{ADMIN_ORDERS}/{order.public_id}/tags", {"tags": ["ok", "  "]}, format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid tag."}


@pytest.mark.django_db
def test_send_payment_link_moves_status(admin_client, order):
    r = admin_client.post(
        f"{ADMIN_ORDERS}/{order.public_id}/payment-link",
        {"paymentLink": "https://paypal.me/shop/54.90"},
        format="json",
    )
    assert r.status_code == 200
    assert r.json() == {"ok": True, "email_sent": False}
    order.refresh_from_db()
    assert order.status == "payment_link_sent"

    # resending keeps the status
    r = admin_client.post(f"{ADMIN_ORDERS}/{order.public_id}/payment-link", {"link": "https://x.test/p"}, format="json")
    assert r.status_code == 200


@pytest.mark.django_db
@pytest.mark.parametrize(
    "body,message",
    [({}, "Payment link is missing."), ({"link": "ftp://x"}, "Invalid payment link.")],
)
def test_send_payment_link_validation(admin_client, order, body, message):
    r = admin_client.post(f"{ADMIN_ORDERS}/{order.public_id}/payment-link", body, format="json")
    assert r.status_code == 400
    assert r.json() == {"error": message}


@pytest.mark.django_db
def test_payment_link_not_allowed_for_paid_order(admin_client):
    order = make_order(status="paid", payment_status="paid")
    r = admin_client.post(f"{ADMIN_ORDERS}/{order.public_id}/payment-link", {"link": "https://x.test"}, format="json")
    assert r.status_code == 400
    assert Order.objects.get(pk=order.pk).status == "paid"


@pytest.mark.django_db
def test_order_tag_catalogue(admin_client):
    r = admin_client.post(ORDER_TAGS, {"name": "Wholesale"}, format="json")
    assert r.status_code == 201
    tag_id = r.json()["tag"]["id"]

    r = admin_client.post(ORDER_TAGS, {"name": "wholesale"}, format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "Tag already exists."}

    r = admin_client.post(ORDER_TAGS, {"name": "x" * 65}, format="json")
    assert r.json() == {"error": "Tag name is too long."}

    assert admin_client.get(ORDER_TAGS).json() == {"tags": [{"id": tag_id, "name": "Wholesale"}]}

    assert admin_client.delete(f"{ORDER_TAGS}/{tag_id}").json() == {"ok": True}
    r = admin_client.delete(f"{ORDER_TAGS}/{tag_id}")
    assert r.status_code == 404
    assert r.json() == {"error": "Tag not found."}
