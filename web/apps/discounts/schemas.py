"""Pydantic schemas for the discount endpoints."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, Overflow

from pydantic import BaseModel, Field, StrictBool, field_validator, model_validator

from apps.common.money import parse_positive_money_to_cents

from .domain import DiscountType, normalize_code


class ValidateDiscountDTO(BaseModel):
    """Body of ``POST /api/discounts/validate``."""

    code: str = Field(default="", validate_default=True)
    subtotal_cents: int = Field(default=0, alias="subtotalCents")

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        v = normalize_code(v)
        if not v:
            raise ValueError("Code is required.")
        return v

    @field_validator("subtotal_cents", mode="before")
    @classmethod
    def validate_subtotal(cls, v):
        try:
            amount = Decimal(str(v if v is not None else 0))
        except InvalidOperation:
            raise ValueError("Invalid subtotal.")
        if not amount.is_finite() or amount < 0:
            raise ValueError("Invalid subtotal.")
        try:
            return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        except (InvalidOperation, Overflow):
            raise ValueError("Invalid subtotal.")


def _parse_percent(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip().replace(",", ".", 1))
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount > 100:
        return None
    try:
        percent = int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except (InvalidOperation, Overflow):
        return None
    # checked after rounding so 0.4 cannot become a 0% code
    return percent if 1 <= percent <= 100 else None


class CreateDiscountDTO(BaseModel):
    """Body of ``POST /api/admin/discounts``.

    ``amount`` is a decimal string or number in currency units ("5,00") and
    is only read for fixed codes; ``percent`` is only read for percent codes.
    """

    code: str = Field(default="", validate_default=True)
    type: DiscountType = DiscountType.FIXED
    amount: str | int | float | None = None
    percent: str | int | float | None = None
    active: StrictBool = True

    amount_cents: int | None = None
    percent_off: int | None = None

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        v = normalize_code(v)
        if not v:
            raise ValueError("Discount code is required.")
        return v

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, v):
        # anything but "percent" is a fixed discount
        return DiscountType.PERCENT if str(v or "").strip() == "percent" else DiscountType.FIXED

    @model_validator(mode="after")
    def resolve_amount(self):
        if self.type == DiscountType.FIXED:
            cents = parse_positive_money_to_cents(self.amount)
            if cents is None:
                raise ValueError("Invalid amount.")
            self.amount_cents, self.percent_off = cents, None
        else:
            percent = _parse_percent(self.percent)
            if percent is None:
                raise ValueError("Invalid percentage.")
            self.amount_cents, self.percent_off = None, percent
        return self


class UpdateDiscountDTO(BaseModel):
    active: StrictBool
