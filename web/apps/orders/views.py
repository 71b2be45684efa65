"""HTTP views for the orders app.

Views stay small: validate the body with a pydantic DTO, delegate pricing to
``CheckoutPricer`` and persistence to ``services.place_order``, then render
a read DTO. Domain errors propagate to ``gateway.exceptions``.

Checkout here covers the manual payment methods (bank transfer, payment
link). Card and PayPal checkouts create their orders in ``apps.payments``
once the provider confirms the money.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.common.errors import InvalidInput, NotFound
from apps.common.pagination import page
from apps.payments.services import get_refund_service
from gateway.permissions import IsStoreAdmin

from .domain import (
    CustomerNotFound,
    DuplicateCustomerEmail,
    OrderNotFound,
    OrderStatus,
    PaymentStatus,
    check_transition,
)
from .models import Customer, Order, OrderTag
from .providers import get_checkout_pricer
from .schemas import (
    AdminCustomerDTO,
    AdminOrderDTO,
    AdminOrderListDTO,
    CheckoutDTO,
    CreateOrderTagDTO,
    CustomerReadDTO,
    OrderSummaryDTO,
    OrderTagsDTO,
    PaymentLinkDTO,
    PublicOrderDTO,
    RefundDTO,
    UpdateOrderCustomerDTO,
    UpdateOrderDTO,
)
from .services import place_order, send_order_confirmation, send_payment_link

logger = logging.getLogger(__name__)

# statuses whose totals count as money spent by a customer
SPENT_STATUSES = (OrderStatus.PAID.value, OrderStatus.FULFILLED.value)


def _dump(dto_cls, row) -> dict:
    return dto_cls.model_validate(row).model_dump(mode="json")


def _admin_queryset():
    return (
        Order.objects.select_related("discount_code")
        .prefetch_related("items", "tags")
        .annotate(items_count=Count("items", distinct=True))
    )


def _customer_queryset():
    return Customer.objects.annotate(
        orders_count=Count("orders", distinct=True),
        amount_spent_cents=Coalesce(Sum("orders__total_cents", filter=Q(orders__status__in=SPENT_STATUSES)), 0),
    ).order_by("-created_at", "-id")


def _get_order(public_id: str, queryset=None) -> Order:
    row = (queryset if queryset is not None else Order.objects).filter(public_id=public_id).first()
    if row is None:
        raise OrderNotFound()
    return row


# ---- Public ----
class OrdersView(APIView):
    """Checkout for manual payment methods."""

    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "checkout"

    def post(self, request):
        """Price the cart, persist the order and send the confirmation.

        Returns:
            Response: 201 with ``{"order": {...}, "email_sent": bool}``.
            Email failures never undo the order.
        """
        dto = CheckoutDTO.model_validate(request.data)
        priced = get_checkout_pricer().price(dto.lines(), dto.shipping_option_id, dto.discount_code)
        order = place_order(dto, priced)
        email_sent = send_order_confirmation(order)
        return Response(
            {"order": _dump(OrderSummaryDTO, order), "email_sent": email_sent},
            status=status.HTTP_201_CREATED,
        )


class PublicOrderView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "checkout"

    def get(self, request, public_id: str):
        order = _get_order(public_id, Order.objects.prefetch_related("items"))
        return Response({"order": _dump(PublicOrderDTO, order)})


# ---- Admin: orders ----
class AdminOrdersView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request):
        qs = _admin_queryset()
        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            if status_filter not in Order.Status.values:
                raise InvalidInput("Invalid status.")
            qs = qs.filter(status=status_filter)
        rows, meta = page(qs, request.query_params)
        return Response({"orders": [_dump(AdminOrderListDTO, r) for r in rows], **meta})


class AdminOrderDetailView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request, public_id: str):
        return Response({"order": _dump(AdminOrderDTO, _get_order(public_id, _admin_queryset()))})

    def patch(self, request, public_id: str):
        """Move the order along the status graph.

        Setting ``paid`` stamps ``paid_at`` the first time only and marks
        the payment status as paid. Same status is a no-op.
        """
        dto = UpdateOrderDTO.model_validate(request.data)
        with transaction.atomic():
            order = _get_order(public_id, Order.objects.select_for_update())
            if check_transition(order.status, dto.status.value):
                order.status = dto.status.value
                fields = ["status", "updated_at"]
                if dto.status == OrderStatus.PAID:
                    if order.paid_at is None:
                        order.paid_at = timezone.now()
                        fields.append("paid_at")
                    if order.payment_status == PaymentStatus.UNPAID.value:
                        order.payment_status = PaymentStatus.PAID.value
                        fields.append("payment_status")
                order.save(update_fields=fields)
                logger.info("order status changed", extra={"order": public_id, "status": order.status})
        return Response({"order": _dump(AdminOrderDTO, _get_order(public_id, _admin_queryset()))})


class AdminOrderTagsView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request, public_id: str):
        order = _get_order(public_id)
        return Response({"tags": list(order.tags.values_list("name", flat=True))})

    def put(self, request, public_id: str):
        """Replace the order's tags, creating unknown names on the fly."""
        dto = OrderTagsDTO.model_validate(request.data)
        with transaction.atomic():
            order = _get_order(public_id, Order.objects.select_for_update())
            tags = []
            for name in dto.tags:
                tag = OrderTag.objects.filter(name__iexact=name).first()
                tags.append(tag or OrderTag.objects.create(name=name))
            order.tags.set(tags)
        return Response({"tags": sorted(t.name for t in tags)})


class AdminOrderCustomerView(APIView):
    permission_classes = [IsStoreAdmin]

    def patch(self, request, public_id: str):
        """Edit the customer linked to the order.

        Only the ``Customer`` row changes; the order keeps the contact
        snapshot taken at checkout.
        """
        dto = UpdateOrderCustomerDTO.model_validate(request.data)
        with transaction.atomic():
            order = _get_order(public_id, Order.objects.select_related("customer"))
            customer = order.customer
            if customer is None:
                raise CustomerNotFound()
            if Customer.objects.filter(email=dto.email).exclude(pk=customer.pk).exists():
                raise DuplicateCustomerEmail()
            for name, value in dto.model_dump().items():
                setattr(customer, name, value)
            try:
                with transaction.atomic():
                    customer.save()
            except IntegrityError:
                raise DuplicateCustomerEmail()
        logger.info("customer updated", extra={"order": public_id, "customer": customer.pk})
        return Response({"customer": _dump(CustomerReadDTO, customer)})


class AdminOrderPaymentLinkView(APIView):
    permission_classes = [IsStoreAdmin]

    def post(self, request, public_id: str):
        dto = PaymentLinkDTO.model_validate(request.data)
        with transaction.atomic():
            order = _get_order(public_id, Order.objects.select_for_update())
            if order.status != OrderStatus.PAYMENT_LINK_SENT.value:
                check_transition(order.status, OrderStatus.PAYMENT_LINK_SENT.value)
                order.status = OrderStatus.PAYMENT_LINK_SENT.value
                order.save(update_fields=["status", "updated_at"])
        email_sent = send_payment_link(order, dto.link)
        return Response({"ok": True, "email_sent": email_sent})


class AdminOrderRefundView(APIView):
    permission_classes = [IsStoreAdmin]

    def post(self, request, public_id: str):
        dto = RefundDTO.model_validate(request.data)
        order = get_refund_service().refund(public_id, dto.amount_cents)
        return Response({
            "ok": True,
            "refunded_cents": order.refunded_cents,
            "payment_status": order.payment_status,
        })


# ---- Admin: tags ----
class AdminOrderTagListView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request):
        return Response({"tags": [{"id": t.id, "name": t.name} for t in OrderTag.objects.all()]})

    def post(self, request):
        dto = CreateOrderTagDTO.model_validate(request.data)
        if OrderTag.objects.filter(name__iexact=dto.name).exists():
            raise InvalidInput("Tag already exists.")
        try:
            with transaction.atomic():
                tag = OrderTag.objects.create(name=dto.name)
        except IntegrityError:
            raise InvalidInput("Tag already exists.")
        return Response({"tag": {"id": tag.id, "name": tag.name}}, status=status.HTTP_201_CREATED)


class AdminOrderTagDetailView(APIView):
    permission_classes = [IsStoreAdmin]

    def delete(self, request, pk: int):
        deleted, _ = OrderTag.objects.filter(pk=pk).delete()
        if not deleted:
            raise NotFound("Tag not found.")
        return Response({"ok": True})


# ---- Admin: customers ----
class AdminCustomersView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request):
        """Customers, newest first, with their order count and amount spent.

        ``q`` filters on email and name.
        """
        qs = _customer_queryset()
        q = (request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(email__icontains=q) | Q(first_name__icontains=q) | Q(last_name__icontains=q))
        rows, meta = page(qs, request.query_params)
        return Response({"customers": [_dump(AdminCustomerDTO, r) for r in rows], **meta})


class AdminCustomerDetailView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request, pk: int):
        customer = _customer_queryset().filter(pk=pk).first()
        if customer is None:
            raise CustomerNotFound()
        orders = customer.orders.prefetch_related("items").order_by("-created_at", "-id")
        return Response({
            "customer": _dump(AdminCustomerDTO, customer),
            "orders": [_dump(PublicOrderDTO, o) for o in orders],
        })
