"""ORM-backed implementation of the ``DiscountLookup`` port."""

from .domain import Discount, DiscountType
from .models import DiscountCode


def to_domain(row: DiscountCode) -> Discount:
    return Discount(
        id=row.id,
        code=row.code,
        discount_type=DiscountType(row.discount_type),
        amount_cents=row.amount_cents,
        percent_off=row.percent_off,
    )


class DiscountRepository:
    """Repository reading discount codes through the Django ORM.

    Returns domain ``Discount`` snapshots so pricing code never holds a
    model instance it could accidentally save.
    """

    def find_active(self, code: str) -> Discount | None:
        row = DiscountCode.objects.filter(code=code, active=True).first()
        return to_domain(row) if row else None
