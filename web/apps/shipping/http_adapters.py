"""Sendcloud HTTP client implementing ``CarrierPort``.

The panel API authenticates with HTTP Basic built from the decrypted
public/private key pair; the service-point API only takes the public key
as ``access_token``. Calls are single-shot: no retries, a configured
timeout, and ``X-Request-ID`` propagation. Provider error details are
logged and replaced by a generic ``UpstreamError`` message.
"""

import logging
from decimal import Decimal
from urllib.parse import urlparse

import httpx
from django.conf import settings

from apps.common.errors import UpstreamError
from apps.common.http import error_detail, http_timeout, request_headers

from .domain import CarrierError, CarrierPort, Shipment, format_delivery_status

logger = logging.getLogger(__name__)

LABEL_ORIGIN = "https://panel.sendcloud.sc"
LABEL_PATH_PREFIX = "/api/v3/"


def _text(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def compact(record: dict) -> dict:
    """Drop keys whose value is blank once stringified."""
    return {k: _text(v) for k, v in record.items() if _text(v)}


def is_label_url_allowed(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    origin = f"{parsed.scheme}://{parsed.netloc}"
    return origin == LABEL_ORIGIN and parsed.path.startswith(LABEL_PATH_PREFIX)


def parse_quote_option(option: dict) -> dict:
    quotes = option.get("quotes") if isinstance(option.get("quotes"), list) else []
    quote = quotes[0] if quotes else {}
    total = ((quote or {}).get("price") or {}).get("total") or None
    price = None
    if total:
        price = {"value": str(total.get("value") or ""), "currency": str(total.get("currency") or "EUR")}
    lead_time = (quote or {}).get("lead_time")
    return {
        "code": str(option.get("code") or ""),
        "name": str(option.get("name") or ""),
        "carrier_name": _text((option.get("carrier") or {}).get("name")),
        "price": price,
        "lead_time": lead_time if isinstance(lead_time, (int, float)) else None,
        "last_mile": _text((option.get("functionalities") or {}).get("last_mile")),
        "requires_service_point": bool((option.get("requirements") or {}).get("is_service_point_required")),
    }


def parse_service_point(point: dict) -> dict:
    try:
        distance = float(point.get("distance"))
    except (TypeError, ValueError):
        distance = None
    opening = point.get("formatted_opening_times")
    return {
        "id": point.get("id"),
        "name": point.get("name"),
        "street": point.get("street"),
        "house_number": point.get("house_number"),
        "postal_code": point.get("postal_code"),
        "city": point.get("city"),
        "distance": distance,
        "formatted_opening_times": opening if isinstance(opening, dict) else None,
    }


def normalize_sender_address(raw: dict | None) -> dict | None:
    if not raw:
        return None
    line1 = _text(raw.get("address_line_1") or raw.get("street"))
    postal_code = _text(raw.get("postal_code"))
    city = _text(raw.get("city"))
    if not (line1 and postal_code and city):
        return None
    country = (_text(raw.get("country_code")) or "").upper()
    return compact({
        "name": _text(raw.get("name")) or _text(raw.get("contact_name")) or _text(raw.get("company_name")) or "Sender",
        "company_name": raw.get("company_name"),
        "address_line_1": line1,
        "address_line_2": raw.get("address_line_2"),
        "house_number": raw.get("house_number"),
        "postal_code": postal_code,
        "city": city,
        "country_code": country if len(country) == 2 else settings.DEFAULT_COUNTRY,
        "phone_number": raw.get("phone_number") or raw.get("telephone"),
        "email": raw.get("email"),
        "po_box": raw.get("po_box"),
    })


def parse_shipment(data: dict) -> Shipment:
    shipment = (data or {}).get("data") or {}
    parcels = shipment.get("parcels") if isinstance(shipment.get("parcels"), list) else []
    parcel = parcels[0] if parcels else {}
    documents = parcel.get("documents") if isinstance(parcel.get("documents"), list) else []
    label = next((d for d in documents if isinstance(d, dict) and d.get("type") == "label"), {})
    status = parcel.get("status") or {}
    raw_status = (_text(status.get("code")) or _text(status.get("message"))) if isinstance(status, dict) else None
    try:
        parcel_id = int(parcel.get("id"))
    except (TypeError, ValueError):
        parcel_id = None
    return Shipment(
        shipment_id=_text(shipment.get("id")),
        parcel_id=parcel_id,
        label_url=_text(label.get("link")),
        tracking_number=_text(parcel.get("tracking_number")),
        tracking_url=_text(parcel.get("tracking_url")),
        delivery_status=format_delivery_status(raw_status),
    )


class SendcloudClient(CarrierPort):
    """HTTP client for the Sendcloud panel and service-point APIs."""

    def __init__(self, public_key: str, private_key: str, base_url: str | None = None, timeout: float | None = None):
        self.public_key = public_key
        self.private_key = private_key
        self.base_url = (base_url or settings.SENDCLOUD_BASE_URL).rstrip("/")
        self.timeout = timeout or http_timeout()

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, auth=(self.public_key, self.private_key))

    def _fail(self, op: str, resp=None, exc: Exception | None = None, message: str | None = None):
        logger.warning(
            "sendcloud call failed",
            extra={
                "op": op,
                "status": getattr(resp, "status_code", None),
                "detail": error_detail(resp) if resp is not None else str(exc),
            },
        )
        raise UpstreamError(message or "Shipping provider error.")

    def _shipping_options(self, payload: dict, op: str) -> list:
        try:
            with self._client() as client:
                resp = client.post(f"{self.base_url}/shipping-options", json=payload, headers=request_headers())
        except httpx.HTTPError as exc:
            self._fail(op, exc=exc)
        if resp.status_code >= 400:
            self._fail(op, resp=resp)
        data = resp.json()
        return data.get("data") if isinstance(data, dict) and isinstance(data.get("data"), list) else []

    def quote(self, to_country: str, to_postal_code: str, carrier_code: str, weight_kg) -> list[dict]:
        """Return priced shipping options for one parcel of ``weight_kg``."""
        payload = {
            "from_country_code": settings.DEFAULT_COUNTRY,
            "to_country_code": to_country,
            "to_postal_code": to_postal_code,
            "parcels": [{"weight": {"value": f"{Decimal(weight_kg):.3f}", "unit": "kg"}}],
            "carrier_code": carrier_code,
            "calculate_quotes": True,
        }
        options = self._shipping_options(payload, "quote")
        logger.info("sendcloud quote", extra={"carrier": carrier_code, "count": len(options)})
        return [parse_quote_option(o) for o in options if isinstance(o, dict)]

    def carriers(self) -> list[str]:
        """Distinct carrier codes (or names), sorted, with "Other" appended."""
        payload = {"parcels": [{"weight": {"value": "1", "unit": "kg"}}], "calculate_quotes": False}
        unique: dict[str, str] = {}
        for option in self._shipping_options(payload, "carriers"):
            carrier = (option or {}).get("carrier") or {}
            label = _text(carrier.get("code")) or _text(carrier.get("name"))
            if label:
                unique[label.lower()] = label
        carriers = sorted(unique.values(), key=str.lower)
        if "Other" not in carriers:
            carriers.append("Other")
        return carriers

    def service_points(self, country: str, address: str, postal_code: str, city: str, carrier: str = "") -> list[dict]:
        """Nearby pickup points, closest first; points without distance last."""
        params = {
            "country": country,
            "address": address,
            "city": city,
            "postal_code": postal_code,
            "access_token": self.public_key,
        }
        if carrier:
            params["carrier"] = carrier
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.get(
                    settings.SENDCLOUD_SERVICE_POINTS_URL,
                    params=params,
                    headers=request_headers({"X-Requested-With": "XMLHttpRequest"}),
                )
        except httpx.HTTPError as exc:
            self._fail("service_points", exc=exc, message="Failed to load service points.")
        if resp.status_code >= 400:
            self._fail("service_points", resp=resp, message="Failed to load service points.")
        data = resp.json()
        points = [parse_service_point(p) for p in data if isinstance(p, dict)] if isinstance(data, list) else []
        points.sort(key=lambda p: p["distance"] if p["distance"] is not None else float("inf"))
        return points

    def sender_address(self) -> dict | None:
        """The default sender address configured in the Sendcloud account."""
        try:
            with self._client() as client:
                resp = client.get(
                    f"{self.base_url}/addresses/sender-addresses",
                    params={"page_size": 100},
                    headers=request_headers(),
                )
        except httpx.HTTPError as exc:
            self._fail("sender_address", exc=exc)
        if resp.status_code == 404:
            raise CarrierError("Sender address not found in Sendcloud. Add one in your Sendcloud account.")
        if resp.status_code >= 400:
            self._fail("sender_address", resp=resp)
        data = resp.json()
        entries = data.get("data") if isinstance(data, dict) else data
        entries = [e for e in entries if isinstance(e, dict)] if isinstance(entries, list) else []
        if not entries:
            return None
        preferred = next((e for e in entries if e.get("is_default") or e.get("default")), entries[0])
        return normalize_sender_address(preferred)

    def announce_shipment(self, payload: dict) -> Shipment:
        """Announce a parcel and return its label and tracking references."""
        try:
            with self._client() as client:
                resp = client.post(f"{self.base_url}/shipments/announce", json=payload, headers=request_headers())
        except httpx.HTTPError as exc:
            self._fail("announce", exc=exc, message="Failed to create shipping label.")
        if resp.status_code >= 400:
            self._fail("announce", resp=resp, message="Failed to create shipping label.")
        shipment = parse_shipment(resp.json())
        logger.info("sendcloud shipment announced", extra={"shipment_id": shipment.shipment_id, "parcel_id": shipment.parcel_id})
        return shipment

    def download_label(self, url: str) -> tuple[bytes, str]:
        """Fetch a label document; only Sendcloud panel URLs are allowed."""
        if not is_label_url_allowed(url):
            raise CarrierError("Unsupported label URL.")
        try:
            with self._client() as client:
                resp = client.get(url, headers=request_headers())
        except httpx.HTTPError as exc:
            self._fail("download_label", exc=exc, message="Failed to fetch label.")
        if resp.status_code >= 400:
            self._fail("download_label", resp=resp, message="Failed to fetch label.")
        return resp.content, resp.headers.get("content-type", "application/pdf")
