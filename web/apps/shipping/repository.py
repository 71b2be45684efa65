"""ORM-backed implementation of the ``ShippingOptionLookup`` port."""

from .domain import ShippingOptionInfo, ShippingType
from .models import ShippingOption


def to_domain(row: ShippingOption) -> ShippingOptionInfo:
    return ShippingOptionInfo(
        id=row.id,
        carrier=row.carrier,
        shipping_type=ShippingType(row.shipping_type),
        title=row.title,
        price=row.price,
        min_order_total=row.min_order_total,
        max_order_total=row.max_order_total,
    )


class ShippingOptionRepository:
    def get(self, option_id: int) -> ShippingOptionInfo | None:
        row = ShippingOption.objects.filter(pk=option_id).first()
        return to_domain(row) if row else None
