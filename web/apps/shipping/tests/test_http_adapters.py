"""Unit tests for the Sendcloud HTTP client and its response parsers.

``httpx.Client`` calls are monkeypatched; nothing leaves the process.
"""

from decimal import Decimal

import httpx
import pytest

from apps.common.errors import UpstreamError
from apps.shipping.domain import CarrierError
from apps.shipping.http_adapters import (
    SendcloudClient,
    is_label_url_allowed,
    normalize_sender_address,
    parse_quote_option,
    parse_shipment,
)


class DummyResp:
    def __init__(self, status_code=200, json_data=None, content=b"", headers=None):
        self.status_code = status_code
        self._json = json_data if json_data is not None else {}
        self.content = content
        self.headers = headers or {}
        self.text = str(self._json)

    def json(self):
        return self._json


@pytest.fixture
def client():
    return SendcloudClient("pub", "priv", base_url="https://panel.sendcloud.sc/api/v3", timeout=5)


def test_quote_sends_weight_and_parses_options(monkeypatch, client):
    calls = []

    def fake_post(self, url, json=None, headers=None, **kw):
        calls.append((url, json))
        return DummyResp(200, {"data": [{
            "code": "colissimo:home",
            "name": "Colissimo Home",
            "carrier": {"code": "colissimo", "name": "Colissimo"},
            "quotes": [{"price": {"total": {"value": "6.35", "currency": "EUR"}}, "lead_time": 48}],
            "functionalities": {"last_mile": "home_delivery"},
        }]})

    monkeypatch.setattr(httpx.Client, "post", fake_post)
    options = client.quote("FR", "75002", "colissimo", Decimal("1.2"))

    url, payload = calls[0]
    assert url == "https://panel.sendcloud.sc/api/v3/shipping-options"
    assert payload["parcels"][0]["weight"] == {"value": "1.200", "unit": "kg"}
    assert options == [{
        "code": "colissimo:home",
        "name": "Colissimo Home",
        "carrier_name": "Colissimo",
        "price": {"value": "6.35", "currency": "EUR"},
        "lead_time": 48,
        "last_mile": "home_delivery",
        "requires_service_point": False,
    }]


def test_carriers_are_unique_sorted_with_other(monkeypatch, client):
    data = {"data": [
        {"carrier": {"code": "mondial_relay"}},
        {"carrier": {"code": "colissimo"}},
        {"carrier": {"code": "Colissimo"}},
        {"carrier": {}},
    ]}
    monkeypatch.setattr(httpx.Client, "post", lambda self, url, **kw: DummyResp(200, data))
    assert client.carriers() == ["Colissimo", "mondial_relay", "Other"]


def test_provider_error_is_generic(monkeypatch, client):
    monkeypatch.setattr(httpx.Client, "post", lambda self, url, **kw: DummyResp(500, {"error": "secret detail"}))
    with pytest.raises(UpstreamError) as e:
        client.quote("FR", "75002", "colissimo", Decimal("1"))
    assert e.value.message == "Shipping provider error."


def test_network_error_on_announce(monkeypatch, client):
    def boom(self, url, **kw):
        raise httpx.ConnectTimeout("slow")

    monkeypatch.setattr(httpx.Client, "post", boom)
    with pytest.raises(UpstreamError) as e:
        client.announce_shipment({})
    assert e.value.message == "Failed to create shipping label."


def test_service_points_sorted_by_distance(monkeypatch, client):
    seen = {}

    def fake_get(self, url, params=None, headers=None, **kw):
        seen.update(params)
        return DummyResp(200, [
            {"id": 1, "name": "Far", "distance": "900"},
            {"id": 2, "name": "Unknown", "distance": None},
            {"id": 3, "name": "Near", "distance": 50},
        ])

    monkeypatch.setattr(httpx.Client, "get", fake_get)
    points = client.service_points("FR", "1 rue X", "75002", "Paris")
    assert [p["id"] for p in points] == [3, 1, 2]
    assert seen["access_token"] == "pub"
    assert "carrier" not in seen


def test_sender_address_prefers_default(monkeypatch, client):
    data = {"data": [
        {"street": "1 quai A", "postal_code": "69001", "city": "Lyon", "country_code": "FR"},
        {"street": "2 rue B", "postal_code": "75002", "city": "Paris", "country_code": "fr",
         "company_name": "Atelier", "is_default": True},
    ]}
    monkeypatch.setattr(httpx.Client, "get", lambda self, url, **kw: DummyResp(200, data))
    sender = client.sender_address()
    assert sender["address_line_1"] == "2 rue B"
    assert sender["name"] == "Atelier"
    assert sender["country_code"] == "FR"


def test_sender_address_404(monkeypatch, client):
    monkeypatch.setattr(httpx.Client, "get", lambda self, url, **kw: DummyResp(404, {}))
    with pytest.raises(CarrierError):
        client.sender_address()


def test_download_label_only_for_panel_urls(client):
    with pytest.raises(CarrierError):
        client.download_label("https://evil.test/api/v3/label.pdf")
    assert is_label_url_allowed("https://panel.sendcloud.sc/api/v3/parcels/1/documents/label")
    assert not is_label_url_allowed("https://panel.sendcloud.sc/other/label")
    assert not is_label_url_allowed("http://panel.sendcloud.sc/api/v3/parcels/1")


def test_parse_shipment_reads_first_parcel():
    shipment = parse_shipment({"data": {
        "id": "shp_9",
        "parcels": [{
            "id": "321",
            "tracking_number": "TRK9",
            "tracking_url": "https://t.test/TRK9",
            "status": {"code": "READY_TO_SEND", "message": "Ready to send"},
            "documents": [{"type": "customs", "link": "x"}, {"type": "label", "link": "https://l.test/9"}],
        }],
    }})
    assert shipment.shipment_id == "shp_9"
    assert shipment.parcel_id == 321
    assert shipment.label_url == "https://l.test/9"
    assert shipment.delivery_status == "Label created"


def test_parse_quote_option_without_quotes():
    parsed = parse_quote_option({"code": "x", "name": "X", "requirements": {"is_service_point_required": True}})
    assert parsed["price"] is None
    assert parsed["requires_service_point"] is True


def test_incomplete_sender_is_ignored():
    assert normalize_sender_address({"street": "1 rue", "city": "Paris"}) is None
