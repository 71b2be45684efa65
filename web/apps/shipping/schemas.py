"""Pydantic schemas for the shipping endpoints."""

from decimal import Decimal, InvalidOperation

from django.conf import settings
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from apps.common.money import normalize_decimal_string, parse_money_to_cents

from .domain import ShippingType

Amount = str | int | float | None


def _optional_price(value, message: str) -> str | None:
    """Blank means "no bound"; anything else must be a valid amount."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    normalized = normalize_decimal_string(value)
    if normalized is None:
        raise ValueError(message)
    return normalized


def check_bounds(min_total: str | None, max_total: str | None) -> None:
    if min_total is None or max_total is None:
        return
    if parse_money_to_cents(min_total) > parse_money_to_cents(max_total):
        raise ValueError("Minimum order total must be less than the maximum.")


def _weight(value) -> Decimal:
    try:
        weight = Decimal(str(value if value is not None else 0).strip().replace(",", ".", 1))
    except InvalidOperation:
        raise ValueError("Invalid weight.")
    if not weight.is_finite() or weight <= 0:
        raise ValueError("Invalid weight.")
    return weight


def _shipping_type(value) -> ShippingType | None:
    raw = str(value or "").strip()
    try:
        return ShippingType(raw)
    except ValueError:
        raise ValueError("Shipping type is required.")


class CreateShippingOptionDTO(BaseModel):
    """Body of ``POST /api/admin/shipping/options``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    carrier: str = Field(default="", validate_default=True)
    shipping_type: ShippingType | None = Field(
        default=None,
        validate_default=True,
        validation_alias=AliasChoices("shippingType", "shipping_type", "type"),
    )
    title: str = Field(default="", validate_default=True)
    description: str | None = None
    price: Amount = Field(default=None, validate_default=True)
    min_order_total: Amount = None
    max_order_total: Amount = None

    @field_validator("carrier")
    @classmethod
    def validate_carrier(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Carrier is required.")
        return v

    @field_validator("shipping_type", mode="before")
    @classmethod
    def validate_type(cls, v):
        return _shipping_type(v)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required.")
        return v

    @field_validator("description")
    @classmethod
    def blank_description(cls, v):
        return (v or "").strip() or None

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        normalized = normalize_decimal_string(v)
        if normalized is None:
            raise ValueError("Price is required.")
        return normalized

    @field_validator("min_order_total")
    @classmethod
    def validate_min(cls, v):
        return _optional_price(v, "Minimum order total is invalid.")

    @field_validator("max_order_total")
    @classmethod
    def validate_max(cls, v):
        return _optional_price(v, "Maximum order total is invalid.")

    @model_validator(mode="after")
    def validate_bounds(self):
        check_bounds(self.min_order_total, self.max_order_total)
        return self


class UpdateShippingOptionDTO(BaseModel):
    """Body of ``PATCH /api/admin/shipping/options/<id>``; every field optional.

    Bounds sent as ``""`` or null are cleared. The min/max ordering is
    checked by the view against the merged record.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    carrier: str | None = None
    shipping_type: ShippingType | None = Field(
        default=None, validation_alias=AliasChoices("shippingType", "shipping_type", "type")
    )
    title: str | None = None
    description: str | None = None
    price: Amount = None
    min_order_total: Amount = None
    max_order_total: Amount = None

    @field_validator("carrier")
    @classmethod
    def validate_carrier(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Carrier is required.")
        return v.strip() if v is not None else None

    @field_validator("shipping_type", mode="before")
    @classmethod
    def validate_type(cls, v):
        return _shipping_type(v)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Title is required.")
        return v.strip() if v is not None else None

    @field_validator("description")
    @classmethod
    def blank_description(cls, v):
        return (v or "").strip() or None

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        normalized = normalize_decimal_string(v)
        if normalized is None:
            raise ValueError("Invalid price.")
        return normalized

    @field_validator("min_order_total")
    @classmethod
    def validate_min(cls, v):
        return _optional_price(v, "Minimum order total is invalid.")

    @field_validator("max_order_total")
    @classmethod
    def validate_max(cls, v):
        return _optional_price(v, "Maximum order total is invalid.")

    def changes(self) -> dict:
        """Only the fields the client actually sent."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class ReorderShippingOptionsDTO(BaseModel):
    ids: list = Field(default_factory=list, validate_default=True)

    @field_validator("ids")
    @classmethod
    def validate_ids(cls, v: list) -> list[int]:
        ids = []
        for raw in v:
            if isinstance(raw, bool):
                continue
            if isinstance(raw, float) and raw.is_integer():
                raw = int(raw)
            try:
                value = int(str(raw).strip())
            except ValueError:
                continue
            if value > 0:
                ids.append(value)
        if not ids or len(set(ids)) != len(ids):
            raise ValueError("Invalid ids.")
        return ids


class QuoteDTO(BaseModel):
    """Body of ``POST /api/admin/shipping/quote``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    to_country_code: str = ""
    to_postal_code: str = ""
    carrier_code: str = ""
    total_weight_kg: Decimal | None = Field(default=None, validate_default=True)

    @field_validator("to_country_code")
    @classmethod
    def upper_country(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("to_postal_code", "carrier_code")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def validate_destination(self):
        if not self.to_country_code or not self.to_postal_code:
            raise ValueError("Shipping destination is missing.")
        return self

    @field_validator("total_weight_kg", mode="before")
    @classmethod
    def validate_weight(cls, v):
        return _weight(v)


class CreateLabelDTO(BaseModel):
    """Body of ``POST /api/admin/shipping/labels``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    order_public_id: str = Field(default="", validate_default=True)
    shipping_option_code: str = Field(default="", validate_default=True)
    total_weight_kg: Decimal | None = Field(default=None, validate_default=True)

    @field_validator("order_public_id")
    @classmethod
    def validate_order(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Order is missing.")
        return v

    @field_validator("shipping_option_code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Shipping option is missing.")
        return v

    @field_validator("total_weight_kg", mode="before")
    @classmethod
    def validate_weight(cls, v):
        return _weight(v)


class ServicePointsQuery(BaseModel):
    country: str = ""
    address: str = ""
    postal_code: str = ""
    city: str = ""
    carrier: str = ""

    @field_validator("country")
    @classmethod
    def default_country(cls, v: str) -> str:
        return v.strip().upper() or settings.DEFAULT_COUNTRY

    @field_validator("address", "postal_code", "city", "carrier")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def require_address(self):
        if not (self.address and self.postal_code and self.city):
            raise ValueError("Address, postal code, and city are required.")
        return self
