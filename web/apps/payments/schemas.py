from pydantic import AliasChoices, Field, field_validator

from apps.orders.schemas import CartDTO, CheckoutDTO


def _reference(value, message: str) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValueError(message)
    return text


class CreatePaymentIntentDTO(CartDTO):
    pass


class ConfirmCardOrderDTO(CheckoutDTO):
    payment_intent_id: str = Field(
        default="",
        validate_default=True,
        validation_alias=AliasChoices("paymentIntentId", "payment_intent_id"),
    )
    preferred_payment_method: str = "Stripe"

    @field_validator("preferred_payment_method", mode="before")
    @classmethod
    def validate_method(cls, v):
        return "Stripe"

    @field_validator("payment_intent_id", mode="before")
    @classmethod
    def validate_intent(cls, v):
        return _reference(v, "Invalid payment.")


class CreatePayPalOrderDTO(CartDTO):
    pass


class CapturePayPalOrderDTO(CheckoutDTO):
    order_id: str = Field(
        default="", validate_default=True, validation_alias=AliasChoices("orderId", "order_id")
    )
    preferred_payment_method: str = "PayPal"

    @field_validator("preferred_payment_method", mode="before")
    @classmethod
    def validate_method(cls, v):
        return "PayPal"

    @field_validator("order_id", mode="before")
    @classmethod
    def validate_order_id(cls, v):
        return _reference(v, "PayPal order id is missing.")
