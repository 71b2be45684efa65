"""Label creation and carrier status updates for orders.

Both functions bridge the carrier port and the ``Order`` table: labels are
announced from the order's own address snapshot, and webhook events are
matched back to orders by parcel id or tracking number.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.common.errors import InvalidInput
from apps.common.money import format_cents
from apps.orders.domain import OrderNotFound, OrderStatus, check_transition
from apps.orders.models import Order

from .domain import CarrierPort, SenderAddressMissing, ShippingType, format_delivery_status
from .http_adapters import compact

logger = logging.getLogger(__name__)

LABELABLE_STATUSES = {OrderStatus.PAID.value, OrderStatus.FULFILLED.value}


def _recipient(order: Order) -> dict:
    country = (order.country or "").strip().upper()
    recipient = compact({
        "name": f"{order.first_name} {order.last_name}".strip() or "Customer",
        "address_line_1": order.address1,
        "address_line_2": order.address2,
        "postal_code": order.postal_code,
        "city": order.city,
        "country_code": country if len(country) == 2 else settings.DEFAULT_COUNTRY,
        "phone_number": order.phone,
        "email": order.email,
    })
    if not all(recipient.get(k) for k in ("address_line_1", "postal_code", "city")):
        raise InvalidInput("Shipping address is incomplete.")
    return recipient


def build_label_payload(order: Order, sender: dict, option_code: str, weight_kg: Decimal) -> dict:
    """Sendcloud ``shipments/announce`` body for a single-parcel order.

    Raises:
        InvalidInput: Incomplete address or a service-point order without
            a chosen point.
    """
    is_service_point = order.shipping_option_type == ShippingType.SERVICE_POINTS.value
    if is_service_point and not order.service_point_id:
        raise InvalidInput("Service point is missing for this order.")
    payload = {
        "label_details": {"mime_type": "application/pdf", "dpi": 72},
        "to_address": _recipient(order),
        "from_address": sender,
        "ship_with": {
            "type": "shipping_option_code",
            "properties": {"shipping_option_code": option_code},
        },
        "order_number": str(order.order_number) if order.order_number else order.public_id,
        "total_order_price": {"currency": settings.STORE_CURRENCY, "value": format_cents(order.total_cents)},
        "parcels": [{"weight": {"value": f"{weight_kg:.3f}", "unit": "kg"}}],
    }
    if is_service_point:
        payload["to_service_point"] = {"id": str(order.service_point_id)}
    return payload


def create_label(carrier: CarrierPort, public_id: str, option_code: str, weight_kg: Decimal) -> Order:
    """Announce the order's parcel and mark the order fulfilled.

    Raises:
        OrderNotFound: Unknown order.
        InvalidInput: Order not paid yet, or incomplete shipping data.
        SenderAddressMissing: No sender address in the carrier account.
        UpstreamError: The carrier rejected the shipment.
    """
    order = Order.objects.filter(public_id=public_id).first()
    if order is None:
        raise OrderNotFound()
    if order.status not in LABELABLE_STATUSES:
        raise InvalidInput("Order must be paid before creating a label.")

    sender = carrier.sender_address()
    if not sender:
        raise SenderAddressMissing()
    shipment = carrier.announce_shipment(build_label_payload(order, sender, option_code, weight_kg))

    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order.pk)
        order.sendcloud_shipment_id = shipment.shipment_id
        order.sendcloud_parcel_id = shipment.parcel_id
        order.sendcloud_tracking_number = shipment.tracking_number
        order.sendcloud_tracking_url = shipment.tracking_url
        order.shipping_label_url = shipment.label_url
        order.delivery_status = shipment.delivery_status
        fields = [
            "sendcloud_shipment_id",
            "sendcloud_parcel_id",
            "sendcloud_tracking_number",
            "sendcloud_tracking_url",
            "shipping_label_url",
            "delivery_status",
            "updated_at",
        ]
        if check_transition(order.status, OrderStatus.FULFILLED.value):
            order.status = OrderStatus.FULFILLED.value
            fields.append("status")
        order.save(update_fields=fields)

    logger.info("label created", extra={"order": public_id, "parcel_id": shipment.parcel_id})
    return order


def _int_or_none(value) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_parcel_event(payload: dict) -> tuple[int | None, str | None, str]:
    """Extract ``(parcel_id, tracking_number, delivery_status)`` from a webhook.

    Raises:
        InvalidInput: When neither identifier nor a status is present.
    """
    parcel = payload.get("parcel") if isinstance(payload.get("parcel"), dict) else {}
    parcel_id = _int_or_none(payload.get("parcel_id") or parcel.get("id") or payload.get("id"))
    tracking = payload.get("tracking_number") or parcel.get("tracking_number")
    tracking = str(tracking).strip() if tracking else None
    if parcel_id is None and not tracking:
        raise InvalidInput("Parcel identifier is missing.")

    raw = payload.get("parcel_status") or parcel.get("status") or payload.get("status")
    if isinstance(raw, dict):
        code, message = raw.get("code"), raw.get("message")
        raw = " - ".join(str(p) for p in (code, message) if p)
    status = format_delivery_status(str(raw) if raw else None)
    if not status:
        raise InvalidInput("Delivery status is missing.")
    return parcel_id, tracking, status


def apply_parcel_event(payload: dict) -> int:
    """Store the delivery status carried by a carrier webhook.

    Orders are matched by parcel id first, then by tracking number.

    Returns:
        int: Number of orders updated.
    """
    parcel_id, tracking, status = parse_parcel_event(payload)
    now = timezone.now()
    updated = 0
    if parcel_id is not None:
        updated = Order.objects.filter(sendcloud_parcel_id=parcel_id).update(delivery_status=status, updated_at=now)
    if not updated and tracking:
        updated = Order.objects.filter(sendcloud_tracking_number=tracking).update(delivery_status=status, updated_at=now)
    logger.info(
        "parcel status received",
        extra={"parcel_id": parcel_id, "tracking_number": tracking, "delivery_status": status, "updated": updated},
    )
    return updated
