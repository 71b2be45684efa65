"""HTTP views for shipping options, carrier lookups, labels and webhooks.

Public endpoints list the configured options and nearby pickup points.
Admin endpoints manage the options and talk to Sendcloud through the
``CarrierPort`` returned by ``providers.get_carrier_client``.
"""

from django.db import transaction
from django.db.models import Max
from django.http import HttpResponse
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.common.errors import InvalidInput, NotFound
from apps.orders.models import Order
from gateway.permissions import IsStoreAdmin

from .domain import CarrierKeysMissing, ShippingOptionNotFound, is_within_order_total
from .models import ShippingOption
from .providers import get_carrier_client
from .schemas import (
    CreateLabelDTO,
    CreateShippingOptionDTO,
    QuoteDTO,
    ReorderShippingOptionsDTO,
    ServicePointsQuery,
    UpdateShippingOptionDTO,
    check_bounds,
)
from .services import apply_parcel_event, create_label


def serialize_option(row: ShippingOption) -> dict:
    return {
        "id": row.id,
        "carrier": row.carrier,
        "shipping_type": row.shipping_type,
        "title": row.title,
        "description": row.description,
        "price": row.price,
        "min_order_total": row.min_order_total,
        "max_order_total": row.max_order_total,
        "position": row.position,
    }


def _subtotal_param(params) -> int | None:
    raw = (params.get("subtotalCents") or params.get("subtotal_cents") or "").strip()
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value >= 0 else None


# ---- Public ----
class ShippingOptionsView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "shipping_public"

    def get(self, request):
        rows = list(ShippingOption.objects.all())
        subtotal = _subtotal_param(request.query_params)
        if subtotal is not None:
            rows = [r for r in rows if is_within_order_total(r, subtotal)]
        return Response({"options": [serialize_option(r) for r in rows]})


class ServicePointsView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "shipping_public"

    def get(self, request):
        params = request.query_params
        query = ServicePointsQuery(
            country=params.get("country", ""),
            address=params.get("address", ""),
            postal_code=params.get("postalCode") or params.get("postal_code", ""),
            city=params.get("city", ""),
            carrier=params.get("carrier", ""),
        )
        carrier = get_carrier_client(public_only=True)
        points = carrier.service_points(query.country, query.address, query.postal_code, query.city, query.carrier)
        return Response({"servicePoints": points})


# ---- Admin: options ----
class AdminShippingOptionsView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request):
        return Response({"options": [serialize_option(r) for r in ShippingOption.objects.all()]})

    def post(self, request):
        dto = CreateShippingOptionDTO.model_validate(request.data)
        with transaction.atomic():
            last = ShippingOption.objects.select_for_update().aggregate(last=Max("position"))["last"]
            row = ShippingOption.objects.create(
                carrier=dto.carrier,
                shipping_type=dto.shipping_type.value,
                title=dto.title,
                description=dto.description,
                price=dto.price,
                min_order_total=dto.min_order_total,
                max_order_total=dto.max_order_total,
                position=(last or 0) + 1,
            )
        return Response({"option": serialize_option(row)}, status=status.HTTP_201_CREATED)


class AdminShippingOptionDetailView(APIView):
    permission_classes = [IsStoreAdmin]

    def patch(self, request, pk: int):
        dto = UpdateShippingOptionDTO.model_validate(request.data)
        with transaction.atomic():
            row = ShippingOption.objects.select_for_update().filter(pk=pk).first()
            if row is None:
                raise ShippingOptionNotFound()
            for name, value in dto.changes().items():
                if value is None and name in {"carrier", "shipping_type", "title", "price"}:
                    continue
                setattr(row, name, value.value if name == "shipping_type" else value)
            try:
                check_bounds(row.min_order_total, row.max_order_total)
            except ValueError as exc:
                raise InvalidInput(str(exc))
            row.save()
        return Response({"option": serialize_option(row)})

    def delete(self, request, pk: int):
        deleted, _ = ShippingOption.objects.filter(pk=pk).delete()
        if not deleted:
            raise ShippingOptionNotFound()
        return Response({"ok": True})


class AdminShippingOptionsReorderView(APIView):
    permission_classes = [IsStoreAdmin]

    def post(self, request):
        """Rewrite positions as 1..n following the order of ``ids``."""
        dto = ReorderShippingOptionsDTO.model_validate(request.data)
        with transaction.atomic():
            rows = {r.id: r for r in ShippingOption.objects.select_for_update().filter(pk__in=dto.ids)}
            if len(rows) != len(dto.ids):
                raise NotFound("Shipping options not found.")
            for index, option_id in enumerate(dto.ids):
                rows[option_id].position = index + 1
            ShippingOption.objects.bulk_update(rows.values(), ["position"])
        return Response({"options": [serialize_option(r) for r in ShippingOption.objects.all()]})


# ---- Admin: carrier ----
class AdminQuoteView(APIView):
    permission_classes = [IsStoreAdmin]

    def post(self, request):
        dto = QuoteDTO.model_validate(request.data)
        if not dto.carrier_code or dto.carrier_code.lower() == "other":
            return Response({"options": []})
        carrier = get_carrier_client()
        options = carrier.quote(dto.to_country_code, dto.to_postal_code, dto.carrier_code, dto.total_weight_kg)
        return Response({"options": options})


class AdminCarriersView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request):
        try:
            carrier = get_carrier_client()
        except CarrierKeysMissing:
            return Response({"carriers": ["Other"]})
        return Response({"carriers": carrier.carriers()})


class AdminLabelsView(APIView):
    permission_classes = [IsStoreAdmin]

    def post(self, request):
        dto = CreateLabelDTO.model_validate(request.data)
        order = create_label(get_carrier_client(), dto.order_public_id, dto.shipping_option_code, dto.total_weight_kg)
        return Response({
            "shipmentId": order.sendcloud_shipment_id,
            "parcelId": order.sendcloud_parcel_id,
            "labelUrl": order.shipping_label_url,
            "trackingNumber": order.sendcloud_tracking_number,
            "trackingUrl": order.sendcloud_tracking_url,
        })


class AdminLabelDownloadView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request):
        """Proxy a label document so the browser never sees the carrier keys.

        Takes ``orderPublicId`` (uses the stored label URL) or a raw ``url``.
        """
        public_id = (request.query_params.get("orderPublicId") or "").strip()
        url = (request.query_params.get("url") or "").strip()
        if public_id:
            order = Order.objects.filter(public_id=public_id).first()
            if order is None or not order.shipping_label_url:
                raise NotFound("Label not found.")
            url = order.shipping_label_url
        if not url:
            raise InvalidInput("Label URL is missing.")
        content, content_type = get_carrier_client().download_label(url)
        response = HttpResponse(content, content_type=content_type or "application/pdf")
        response["Content-Disposition"] = "attachment; filename=label.pdf"
        return response


# ---- Webhooks ----
class SendcloudWebhookView(APIView):
    """Parcel status callbacks from Sendcloud.

    The endpoint is unauthenticated; payloads only ever touch the
    ``delivery_status`` column of orders that already carry the parcel id.
    """

    authentication_classes = []
    permission_classes = []
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "webhooks"

    def post(self, request):
        if not isinstance(request.data, dict):
            raise InvalidInput("Invalid payload.")
        apply_parcel_event(request.data)
        return Response({"ok": True})
