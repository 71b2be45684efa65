"""Checkout endpoints backed by Stripe and PayPal.

Both flows price the cart server-side twice: once to create the charge and
again when confirming. The confirmed amount and currency must match what the
provider reports as paid, otherwise no order is created. Confirmation
endpoints are idempotent per provider id.
"""

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.orders.providers import get_checkout_pricer
from apps.orders.schemas import OrderSummaryDTO
from apps.orders.services import require_service_point, send_order_confirmation

from .providers import get_paypal_provider, get_stripe_provider
from .schemas import CapturePayPalOrderDTO, ConfirmCardOrderDTO, CreatePaymentIntentDTO, CreatePayPalOrderDTO
from .services import capture_paypal_order, confirm_card_payment


def _price(dto):
    return get_checkout_pricer().price(dto.lines(), dto.shipping_option_id, dto.discount_code)


def _charge_metadata(priced) -> dict:
    return {
        "discount_code": priced.discount_code or "",
        "subtotal_cents": priced.subtotal_cents,
        "shipping_cents": priced.shipping_cents,
        "discount_cents": priced.discount_cents,
        "items": [
            {"name": line.product.title, "qty": line.qty, "unit_cents": line.product.price_cents}
            for line in priced.lines
        ],
    }


def _confirmed(order, created: bool) -> Response:
    email_sent = send_order_confirmation(order) if created else False
    return Response(
        {
            "ok": True,
            "order": OrderSummaryDTO.model_validate(order).model_dump(mode="json"),
            "created": created,
            "email_sent": email_sent,
        },
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )


class CheckoutThrottled(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "checkout"


class StripeCreatePaymentIntentView(CheckoutThrottled):
    def post(self, request):
        dto = CreatePaymentIntentDTO.model_validate(request.data)
        priced = _price(dto)
        charge = get_stripe_provider().create_charge(
            priced.total_cents, settings.STORE_CURRENCY, _charge_metadata(priced)
        )
        return Response({
            "clientSecret": charge.client_secret,
            "paymentIntentId": charge.reference,
            "amountCents": priced.total_cents,
            "currency": settings.STORE_CURRENCY.upper(),
        })


class StripeConfirmOrderView(CheckoutThrottled):
    def post(self, request):
        dto = ConfirmCardOrderDTO.model_validate(request.data)
        priced = _price(dto)
        require_service_point(dto, priced)
        order, created = confirm_card_payment(dto, priced, dto.payment_intent_id)
        return _confirmed(order, created)


class PayPalCreateOrderView(CheckoutThrottled):
    def post(self, request):
        dto = CreatePayPalOrderDTO.model_validate(request.data)
        priced = _price(dto)
        charge = get_paypal_provider().create_charge(
            priced.total_cents, settings.STORE_CURRENCY, _charge_metadata(priced)
        )
        return Response({"orderId": charge.reference, "amountCents": priced.total_cents})


class PayPalCaptureOrderView(CheckoutThrottled):
    def post(self, request):
        dto = CapturePayPalOrderDTO.model_validate(request.data)
        priced = _price(dto)
        require_service_point(dto, priced)
        order, created = capture_paypal_order(dto, priced, dto.order_id)
        return _confirmed(order, created)
