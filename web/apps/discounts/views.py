"""HTTP views for discount codes.

Validation is public and rate limited; management is admin only. The
validation endpoint is read-only so calling it repeatedly with the same
code and subtotal returns the same amount.
"""

from django.db import IntegrityError, transaction
from django.db.models import Count
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from apps.common.errors import InvalidInput, NotFound
from gateway.permissions import IsStoreAdmin

from .domain import DiscountEvaluator
from .models import DiscountCode
from .repository import DiscountRepository
from .schemas import CreateDiscountDTO, UpdateDiscountDTO, ValidateDiscountDTO


def serialize_discount(row: DiscountCode, usage_count: int = 0) -> dict:
    return {
        "id": row.id,
        "code": row.code,
        "discount_type": row.discount_type,
        "amount_cents": row.amount_cents,
        "percent_off": row.percent_off,
        "active": row.active,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "usage_count": usage_count,
    }


class ValidateDiscountView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "discount_validate"

    def post(self, request):
        dto = ValidateDiscountDTO.model_validate(request.data)
        result = DiscountEvaluator(DiscountRepository()).evaluate(dto.code, dto.subtotal_cents)
        d = result.discount
        return Response({
            "valid": True,
            "discount_cents": result.discount_cents,
            "discount": {
                "code": d.code,
                "discount_type": d.discount_type.value,
                "amount_cents": d.amount_cents,
                "percent_off": d.percent_off,
            },
        })


class AdminDiscountsView(APIView):
    permission_classes = [IsStoreAdmin]

    def get(self, request):
        rows = DiscountCode.objects.annotate(usage_count=Count("orders")).order_by("-created_at", "-id")
        return Response({"discounts": [serialize_discount(r, r.usage_count) for r in rows]})

    def post(self, request):
        dto = CreateDiscountDTO.model_validate(request.data)
        try:
            with transaction.atomic():
                row = DiscountCode.objects.create(
                    code=dto.code,
                    discount_type=dto.type.value,
                    amount_cents=dto.amount_cents,
                    percent_off=dto.percent_off,
                    active=dto.active,
                )
        except IntegrityError:
            raise InvalidInput("This discount code already exists.")
        return Response({"discount": serialize_discount(row)}, status=status.HTTP_201_CREATED)


class AdminDiscountDetailView(APIView):
    permission_classes = [IsStoreAdmin]

    def patch(self, request, pk: int):
        dto = UpdateDiscountDTO.model_validate(request.data)
        try:
            row = DiscountCode.objects.get(pk=pk)
        except DiscountCode.DoesNotExist:
            raise NotFound("Discount code not found.")
        row.active = dto.active
        row.save(update_fields=["active", "updated_at"])
        usage = row.orders.count()
        return Response({"discount": serialize_discount(row, usage)})
