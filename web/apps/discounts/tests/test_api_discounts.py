"""API tests for discount validation and administration."""

import pytest

from apps.discounts.models import DiscountCode

VALIDATE_URL = "/api/discounts/validate"
ADMIN_URL = "/api/admin/discounts"


@pytest.fixture
def save10(db):
    return DiscountCode.objects.create(code="save10", discount_type="percent", percent_off=10)


@pytest.mark.django_db
def test_validate_returns_discount_cents(api_client, save10):
    r = api_client.post(VALIDATE_URL, {"code": "Save10", "subtotalCents": 5490}, format="json")
    assert r.status_code == 200
    body = r.json()
    assert body["valid"] is True
    assert body["discount_cents"] == 549
    assert body["discount"]["code"] == "SAVE10"


@pytest.mark.django_db
def test_validate_is_idempotent(api_client, save10):
    before = DiscountCode.objects.values().get(pk=save10.pk)
    first = api_client.post(VALIDATE_URL, {"code": "SAVE10", "subtotalCents": 1234}, format="json").json()
    second = api_client.post(VALIDATE_URL, {"code": "SAVE10", "subtotalCents": 1234}, format="json").json()
    assert first["discount_cents"] == second["discount_cents"] == 123
    assert DiscountCode.objects.values().get(pk=save10.pk) == before


@pytest.mark.django_db
def test_validate_inactive_code_is_not_found(api_client):
    DiscountCode.objects.create(code="OLD", discount_type="fixed", amount_cents=500, active=False)
    r = api_client.post(VALIDATE_URL, {"code": "OLD", "subtotalCents": 1000}, format="json")
    assert r.status_code == 404
    assert r.json() == {"error": "Invalid discount code."}


@pytest.mark.django_db
@pytest.mark.parametrize(
    "payload,message",
    [
        ({"subtotalCents": 100}, "Code is required."),
        ({"code": "X", "subtotalCents": -1}, "Invalid subtotal."),
        ({"code": "X", "subtotalCents": "abc"}, "Invalid subtotal."),
        ({"code": "X", "subtotalCents": "1e30"}, "Invalid subtotal."),
        ({"code": "X", "subtotalCents": "9" * 29}, "Invalid subtotal."),
    ],
)
def test_validate_rejects_bad_input(api_client, payload, message):
    r = api_client.post(VALIDATE_URL, payload, format="json")
    assert r.status_code == 400
    assert r.json() == {"error": message}


@pytest.mark.django_db
def test_validate_rejects_malformed_json(api_client):
    r = api_client.post(VALIDATE_URL, "{not json", content_type="application/json")
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid JSON body."}


@pytest.mark.django_db
def test_admin_create_fixed_and_percent(admin_client):
    r = admin_client.post(ADMIN_URL, {"code": "welcome", "type": "fixed", "amount": "5,00"}, format="json")
    assert r.status_code == 201
    assert r.json()["discount"]["amount_cents"] == 500
    assert r.json()["discount"]["code"] == "WELCOME"

    r = admin_client.post(ADMIN_URL, {"code": "tenoff", "type": "percent", "percent": 10}, format="json")
    assert r.status_code == 201
    d = r.json()["discount"]
    assert (d["discount_type"], d["percent_off"], d["amount_cents"]) == ("percent", 10, None)


@pytest.mark.django_db
@pytest.mark.parametrize(
    "payload,message",
    [
        ({"type": "fixed", "amount": "5"}, "Discount code is required."),
        ({"code": "A", "type": "fixed", "amount": "0"}, "Invalid amount."),
        ({"code": "A", "type": "percent", "percent": 120}, "Invalid percentage."),
        ({"code": "TINY", "type": "percent", "percent": "0.4"}, "Invalid percentage."),
        ({"code": "A", "type": "percent", "percent": "-1e30"}, "Invalid percentage."),
        ({"code": "A", "type": "fixed", "amount": "1e30"}, "Invalid amount."),
    ],
)
def test_admin_create_validation(admin_client, payload, message):
    r = admin_client.post(ADMIN_URL, payload, format="json")
    assert r.status_code == 400
    assert r.json() == {"error": message}


@pytest.mark.django_db
def test_admin_create_duplicate_code(admin_client, save10):
    r = admin_client.post(ADMIN_URL, {"code": "SAVE10", "type": "percent", "percent": 5}, format="json")
    assert r.status_code == 400
    assert r.json() == {"error": "This discount code already exists."}


@pytest.mark.django_db
def test_admin_toggle_active(admin_client, save10):
    r = admin_client.patch(f"{ADMIN_URL}/{save10.pk}", {"active": False}, format="json")
    assert r.status_code == 200
    assert r.json()["discount"]["active"] is False
    save10.refresh_from_db()
    assert save10.active is False


@pytest.mark.django_db
def test_admin_toggle_unknown(admin_client):
    r = admin_client.patch(f"{ADMIN_URL}/999", {"active": False}, format="json")
    assert r.status_code == 404


@pytest.mark.django_db
def test_admin_list_requires_admin(api_client):
    assert api_client.get(ADMIN_URL).status_code == 401
