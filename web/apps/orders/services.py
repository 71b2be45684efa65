"""Order persistence and post-checkout side effects.

``place_order`` is the single place where a priced cart becomes an ``Order``
row; the manual checkout, the Stripe confirmation and the PayPal capture all
go through it so the amount snapshot and the customer upsert stay identical.
"""

import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.common.errors import InvalidInput
from apps.notifications.mailer import try_send_email
from apps.notifications.messages import MessageLine, order_confirmation, payment_link
from apps.shipping.domain import ShippingType

from .customers import upsert_customer
from .domain import OrderStatus, PaymentStatus, PricedCheckout
from .models import ORDER_NUMBER_START, Order, OrderItem
from .schemas import CheckoutDTO

logger = logging.getLogger(__name__)


class ServicePointRequired(InvalidInput):
    default_message = "Service point is required."


def require_service_point(checkout: CheckoutDTO, priced: PricedCheckout) -> None:
    """Reject service-point options that come without a chosen point."""
    option = priced.shipping.option
    if option is None or option.shipping_type != ShippingType.SERVICE_POINTS:
        return
    if checkout.service_point is None or checkout.service_point.id is None:
        raise ServicePointRequired()


def _service_point_fields(checkout: CheckoutDTO, priced: PricedCheckout) -> dict:
    option = priced.shipping.option
    point = checkout.service_point
    if option is None or option.shipping_type != ShippingType.SERVICE_POINTS or point is None:
        return {}
    return {
        "service_point_id": str(point.id or ""),
        "service_point_name": point.name,
        "service_point_street": point.street,
        "service_point_house_number": point.house_number,
        "service_point_postal_code": point.postal_code,
        "service_point_city": point.city,
        "service_point_distance": point.distance,
    }


def place_order(
    checkout: CheckoutDTO,
    priced: PricedCheckout,
    *,
    status: OrderStatus = OrderStatus.PENDING_PAYMENT,
    payment_status: PaymentStatus = PaymentStatus.UNPAID,
    **provider_fields,
) -> Order:
    """Persist the customer, the order and its items atomically.

    Args:
        checkout: Validated checkout body (contact and address).
        priced: Snapshot from ``CheckoutPricer.price``.
        status: Initial fulfilment status.
        payment_status: Initial payment status.
        **provider_fields: Extra ``Order`` columns such as
            ``stripe_payment_intent_id`` or ``paypal_capture_id``.

    Returns:
        Order: The created row, items attached.
    """
    require_service_point(checkout, priced)
    customer, address = checkout.customer, checkout.shipping
    option = priced.shipping.option
    contact = {
        "first_name": customer.first_name,
        "last_name": customer.last_name,
        "phone": customer.phone,
        "address1": address.address1,
        "address2": address.address2,
        "postal_code": address.postal_code,
        "city": address.city,
        "country": address.country,
    }

    with transaction.atomic():
        customer_row = upsert_customer(customer.email, **contact)
        order = Order.objects.create(
            customer=customer_row,
            email=customer.email,
            status=status.value,
            payment_status=payment_status.value,
            preferred_payment_method=checkout.preferred_payment_method,
            subtotal_cents=priced.subtotal_cents,
            shipping_cents=priced.shipping_cents,
            discount_cents=priced.discount_cents,
            total_cents=priced.total_cents,
            discount_code_id=priced.discount.discount.id if priced.discount else None,
            shipping_option_id=option.id if option else None,
            shipping_option_title=option.title if option else "",
            shipping_option_carrier=option.carrier if option else "",
            shipping_option_type=option.shipping_type.value if option else "",
            paid_at=timezone.now() if status == OrderStatus.PAID else None,
            **contact,
            **_service_point_fields(checkout, priced),
            **provider_fields,
        )
        # derived from the primary key, unique without a lock
        order.order_number = ORDER_NUMBER_START - 1 + order.pk
        order.save(update_fields=["order_number"])
        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                product_id=line.product.id,
                title_snapshot=line.product.title,
                unit_price_cents_snapshot=line.product.price_cents,
                qty=line.qty,
            )
            for line in priced.lines
        ])

    logger.info(
        "order placed",
        extra={
            "order": order.public_id,
            "order_number": order.order_number,
            "status": order.status,
            "total_cents": order.total_cents,
        },
    )
    return order


def send_order_confirmation(order: Order) -> bool:
    lines = [MessageLine(i.title_snapshot, i.qty, i.unit_price_cents_snapshot) for i in order.items.all()]
    message = order_confirmation(order.public_id, order.first_name, lines, order.total_cents, settings.STORE_CURRENCY)
    return try_send_email(order.email, message.subject, message.html, message.text)


def send_payment_link(order: Order, link: str) -> bool:
    message = payment_link(order.public_id, order.first_name, link)
    return try_send_email(order.email, message.subject, message.html, message.text)
