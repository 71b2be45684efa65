"""Pydantic schemas for checkout and order administration.

The cart/contact schemas are shared with the payment endpoints, which
price the same cart before talking to Stripe or PayPal.
"""

import re
from datetime import datetime

from django.conf import settings
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .domain import CartLine, OrderStatus

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
FRANCE = {"FR", "FRANCE"}
MAX_QTY = 999

# column widths of the customers table
CONTACT_LIMITS = {
    "first_name": 120,
    "last_name": 120,
    "phone": 40,
    "address1": 255,
    "address2": 255,
    "postal_code": 20,
    "city": 120,
    "country": 64,
}


def _required(value, message: str) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValueError(message)
    return text


def _optional(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _positive_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


# ---- Cart ----
class CartLineDTO(BaseModel):
    product_id: int | None = Field(default=None, validation_alias=AliasChoices("product_id", "productId", "id"))
    qty: int | None = None

    @field_validator("product_id", mode="before")
    @classmethod
    def validate_product(cls, v):
        pid = _positive_int(v)
        if pid is None:
            raise ValueError("Invalid item.")
        return pid

    @field_validator("qty", mode="before")
    @classmethod
    def validate_qty(cls, v):
        qty = _positive_int(v)
        if qty is None or qty > MAX_QTY:
            raise ValueError("Invalid quantity.")
        return qty


class CartDTO(BaseModel):
    """Cart as sent by the storefront: items, optional code and option."""

    items: list[CartLineDTO] = Field(default_factory=list, validate_default=True)
    discount_code: str | None = Field(default=None, validation_alias=AliasChoices("discount_code", "discountCode"))
    shipping_option_id: int | None = Field(
        default=None, validation_alias=AliasChoices("shippingOptionId", "shipping_option_id")
    )

    @field_validator("items")
    @classmethod
    def validate_items(cls, v):
        if not v:
            raise ValueError("Cart is empty.")
        return v

    @field_validator("discount_code", mode="before")
    @classmethod
    def blank_code(cls, v):
        return (v.strip().upper() or None) if isinstance(v, str) else None

    @field_validator("shipping_option_id", mode="before")
    @classmethod
    def option_id(cls, v):
        # unknown shapes mean "no explicit choice"
        return _positive_int(v)

    def lines(self) -> list[CartLine]:
        return [CartLine(item.product_id, item.qty) for item in self.items]


# ---- Contact ----
class CustomerDTO(BaseModel):
    first_name: str = Field(default="", validate_default=True)
    last_name: str = Field(default="", validate_default=True)
    email: str = Field(default="", validate_default=True)
    phone: str = ""

    @field_validator("first_name", mode="before")
    @classmethod
    def validate_first_name(cls, v):
        return _required(v, "First name is required.")

    @field_validator("last_name", mode="before")
    @classmethod
    def validate_last_name(cls, v):
        return _required(v, "Last name is required.")

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        email = _optional(v).lower()
        if not EMAIL_RE.match(email):
            raise ValueError("Invalid email.")
        return email

    @field_validator("phone", mode="before")
    @classmethod
    def strip_phone(cls, v):
        return _optional(v)


class ShippingAddressDTO(BaseModel):
    address1: str = Field(default="", validate_default=True)
    address2: str = ""
    postal_code: str = Field(default="", validate_default=True)
    city: str = Field(default="", validate_default=True)
    country: str = Field(default="", validate_default=True)

    @field_validator("address1", mode="before")
    @classmethod
    def validate_address(cls, v):
        return _required(v, "Shipping address is required.")

    @field_validator("postal_code", mode="before")
    @classmethod
    def validate_postal_code(cls, v):
        return _required(v, "Postal code is required.")

    @field_validator("city", mode="before")
    @classmethod
    def validate_city(cls, v):
        return _required(v, "City is required.")

    @field_validator("address2", mode="before")
    @classmethod
    def strip_address2(cls, v):
        return _optional(v)

    @field_validator("country", mode="before")
    @classmethod
    def validate_country(cls, v):
        raw = _optional(v).upper()
        if raw and raw not in FRANCE:
            raise ValueError("Shipping is only available in France.")
        return settings.DEFAULT_COUNTRY


class ServicePointDTO(BaseModel):
    id: int | None = None
    name: str = ""
    street: str = ""
    house_number: str = ""
    postal_code: str = ""
    city: str = ""
    distance: int | None = None

    @field_validator("id", mode="before")
    @classmethod
    def point_id(cls, v):
        return _positive_int(v)

    @field_validator("name", "street", "house_number", "postal_code", "city", mode="before")
    @classmethod
    def text(cls, v):
        return _optional(v) if not isinstance(v, (int, float)) else str(v)

    @field_validator("distance", mode="before")
    @classmethod
    def rounded_distance(cls, v):
        try:
            return round(float(v))
        except (TypeError, ValueError, OverflowError):
            return None


class CheckoutDTO(CartDTO):
    """Body of ``POST /api/orders`` (manual payment methods)."""

    customer: CustomerDTO = Field(default_factory=dict, validate_default=True)
    shipping: ShippingAddressDTO = Field(default_factory=dict, validate_default=True)
    service_point: ServicePointDTO | None = Field(
        default=None, validation_alias=AliasChoices("servicePoint", "service_point")
    )
    preferred_payment_method: str = Field(
        default="",
        validate_default=True,
        validation_alias=AliasChoices("preferred_payment_method", "preferredPaymentMethod"),
    )

    @field_validator("preferred_payment_method", mode="before")
    @classmethod
    def validate_method(cls, v):
        return _required(v, "Payment method is required.")


# ---- Admin ----
class UpdateOrderDTO(BaseModel):
    status: OrderStatus | None = Field(default=None, validate_default=True)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        try:
            return OrderStatus(str(v or "").strip())
        except ValueError:
            raise ValueError("Invalid status.")


class OrderTagsDTO(BaseModel):
    tags: list = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list) -> list[str]:
        names = []
        for raw in v:
            name = _optional(raw)
            if not name or len(name) > 64:
                raise ValueError("Invalid tag.")
            if name.lower() not in {n.lower() for n in names}:
                names.append(name)
        return names


class CreateOrderTagDTO(BaseModel):
    name: str = Field(default="", validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        name = _required(v, "Tag name is required.")
        if len(name) > 64:
            raise ValueError("Tag name is too long.")
        return name


class PaymentLinkDTO(BaseModel):
    link: str = Field(
        default="",
        validate_default=True,
        validation_alias=AliasChoices("payment_link", "paymentLink", "paypal_link", "link"),
    )

    @field_validator("link", mode="before")
    @classmethod
    def validate_link(cls, v):
        link = _required(v, "Payment link is missing.")
        if not link.lower().startswith(("https://", "http://")):
            raise ValueError("Invalid payment link.")
        return link


class UpdateOrderCustomerDTO(BaseModel):
    """Body of ``PATCH /api/admin/orders/<public_id>/customer``.

    The customer row is replaced as a whole: omitted fields are cleared.
    """

    email: str = Field(default="", validate_default=True)
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    address1: str = ""
    address2: str = ""
    postal_code: str = ""
    city: str = ""
    country: str = ""

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v):
        email = _required(v, "Email is required.").lower()
        if not EMAIL_RE.match(email) or len(email) > 254:
            raise ValueError("Invalid email.")
        return email

    @field_validator(*CONTACT_LIMITS, mode="before")
    @classmethod
    def contact_text(cls, v, info: ValidationInfo):
        text = _optional(v)
        if len(text) > CONTACT_LIMITS[info.field_name]:
            raise ValueError("Customer details are too long.")
        return text


class RefundDTO(BaseModel):
    amount_cents: int = Field(
        default=0, validate_default=True, validation_alias=AliasChoices("amountCents", "amount_cents")
    )

    @field_validator("amount_cents", mode="before")
    @classmethod
    def validate_amount(cls, v):
        if isinstance(v, bool):
            raise ValueError("Invalid refund amount.")
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        try:
            return int(str(v).strip())
        except (TypeError, ValueError):
            raise ValueError("Invalid refund amount.")


# ---- Read models ----
def _related_list(value):
    return list(value.all()) if hasattr(value, "all") else value


class OrderSummaryDTO(BaseModel):
    """Order fields echoed back right after checkout."""

    model_config = ConfigDict(from_attributes=True)

    public_id: str
    order_number: int | None = None
    status: str
    subtotal_cents: int
    shipping_cents: int
    discount_cents: int
    total_cents: int
    created_at: datetime | None = None


class OrderItemReadDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int | None = None
    title_snapshot: str
    unit_price_cents_snapshot: int
    qty: int


class PublicOrderDTO(OrderSummaryDTO):
    payment_status: str
    paid_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderItemReadDTO] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def load_items(cls, v):
        return _related_list(v)


class AdminOrderListDTO(OrderSummaryDTO):
    payment_status: str
    email: str
    first_name: str
    last_name: str
    refunded_cents: int
    preferred_payment_method: str
    delivery_status: str | None = None
    paid_at: datetime | None = None
    items_count: int = 0
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def tag_names(cls, v):
        return [t.name if hasattr(t, "name") else str(t) for t in _related_list(v)]


class AdminOrderDTO(AdminOrderListDTO):
    phone: str
    address1: str
    address2: str
    postal_code: str
    city: str
    country: str
    discount_code: str | None = None
    shipping_option_id: int | None = None
    shipping_option_title: str
    shipping_option_carrier: str
    shipping_option_type: str
    service_point_id: str
    service_point_name: str
    service_point_street: str
    service_point_house_number: str
    service_point_postal_code: str
    service_point_city: str
    stripe_payment_intent_id: str | None = None
    stripe_risk_level: str | None = None
    stripe_outcome_type: str | None = None
    paypal_order_id: str | None = None
    paypal_capture_id: str | None = None
    sendcloud_parcel_id: int | None = None
    sendcloud_tracking_number: str | None = None
    sendcloud_tracking_url: str | None = None
    shipping_label_url: str | None = None
    updated_at: datetime | None = None
    items: list[OrderItemReadDTO] = Field(default_factory=list)

    @field_validator("discount_code", mode="before")
    @classmethod
    def code_text(cls, v):
        return getattr(v, "code", v)

    @field_validator("items", mode="before")
    @classmethod
    def load_items(cls, v):
        return _related_list(v)


class CustomerReadDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str
    phone: str
    address1: str
    address2: str
    postal_code: str
    city: str
    country: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AdminCustomerDTO(CustomerReadDTO):
    """Customer row plus the ``orders_count``/``amount_spent_cents`` annotations."""

    orders_count: int = 0
    amount_spent_cents: int = 0
