"""Domain types, port and evaluator for discount codes.

The evaluator turns a discount code and a base amount (subtotal plus
shipping, in cents) into the number of cents to take off. It is pure with
respect to the discount record: evaluating a code never changes it, so
validating the same code twice yields the same amount.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Protocol

from apps.common.errors import InvalidInput, NotFound
from apps.common.money import round_half_up


class DiscountType(str, Enum):
    FIXED = "fixed"
    PERCENT = "percent"


# ---- Errors ----
class DiscountNotFound(NotFound):
    default_message = "Invalid discount code."


class InvalidDiscountAmount(InvalidInput):
    default_message = "Invalid discount amount."


class InvalidDiscountPercent(InvalidInput):
    default_message = "Invalid discount percentage."


# ---- Entities / DTOs ----
@dataclass(frozen=True)
class Discount:
    """Snapshot of an active discount record.

    Attributes:
        id: Primary key of the persisted record.
        code: Upper-cased code.
        discount_type: ``DiscountType.FIXED`` or ``DiscountType.PERCENT``.
        amount_cents: Fixed reduction, meaningful for fixed codes only.
        percent_off: Percentage in (0, 100], meaningful for percent codes only.
    """

    id: int
    code: str
    discount_type: DiscountType
    amount_cents: int | None = None
    percent_off: int | None = None


@dataclass(frozen=True)
class DiscountResult:
    discount: Discount
    discount_cents: int


# ---- Ports ----
class DiscountLookup(Protocol):
    """Port returning active discounts by normalised code."""

    def find_active(self, code: str) -> Discount | None:
        """Return the active discount whose code equals ``code``, or None.

        Args:
            code: Already trimmed and upper-cased code.
        """
        raise NotImplementedError()


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


# ---- Domain service ----
class DiscountEvaluator:
    """Look up discount codes and compute their reduction."""

    def __init__(self, lookup: DiscountLookup):
        self.lookup = lookup

    def validate(self, code: str | None) -> Discount:
        """Return the active discount for ``code``.

        Raises:
            DiscountNotFound: When the code is blank, unknown or inactive.
        """
        normalized = normalize_code(code)
        if not normalized:
            raise DiscountNotFound()
        discount = self.lookup.find_active(normalized)
        if discount is None:
            raise DiscountNotFound()
        return discount

    def evaluate(self, code: str | None, base_cents: int) -> DiscountResult:
        """Compute the reduction ``code`` grants on ``base_cents``.

        Fixed codes take ``amount_cents`` off; percent codes take
        ``round_half_up(base * percent / 100)``. Either way the result is
        clamped to ``[0, base_cents]`` so a discount never makes a total
        negative. A negative base is treated as zero.

        Args:
            code: Raw code as typed by the customer.
            base_cents: Subtotal plus shipping, in cents.

        Returns:
            DiscountResult: The matched discount and the clamped reduction.

        Raises:
            DiscountNotFound: When no active discount matches.
            InvalidDiscountAmount: When a fixed code has no positive amount.
            InvalidDiscountPercent: When a percent code is outside (0, 100].
        """
        discount = self.validate(code)
        return DiscountResult(discount, compute_discount_cents(discount, base_cents))


def compute_discount_cents(discount: Discount, base_cents: int) -> int:
    base = max(int(base_cents), 0)
    if discount.discount_type == DiscountType.PERCENT:
        percent = discount.percent_off or 0
        if percent <= 0 or percent > 100:
            raise InvalidDiscountPercent()
        raw = round_half_up(Decimal(base) * Decimal(percent) / Decimal(100))
    else:
        amount = discount.amount_cents or 0
        if amount <= 0:
            raise InvalidDiscountAmount()
        raw = amount
    return min(max(raw, 0), base)
