import secrets

from django.db import models
from django.db.models import F, Q


def new_public_id() -> str:
    return secrets.token_hex(6)


# first number handed out on an empty table
ORDER_NUMBER_START = 1001


class Customer(models.Model):
    """Contact and address data, one row per lower-cased email."""

    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=120, blank=True, default="")
    last_name = models.CharField(max_length=120, blank=True, default="")
    phone = models.CharField(max_length=40, blank=True, default="")
    address1 = models.CharField(max_length=255, blank=True, default="")
    address2 = models.CharField(max_length=255, blank=True, default="")
    postal_code = models.CharField(max_length=20, blank=True, default="")
    city = models.CharField(max_length=120, blank=True, default="")
    country = models.CharField(max_length=64, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "customers"

    def __str__(self):
        return self.email


class OrderTag(models.Model):
    name = models.CharField(max_length=64, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "order_tags"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Order(models.Model):
    """A customer purchase.

    Amounts are integer cents. The table enforces
    ``total = subtotal + shipping - discount`` and ``refunded <= total``;
    orders are never hard-deleted.
    """

    class Status(models.TextChoices):
        PENDING_PAYMENT = "pending_payment"
        PAYMENT_LINK_SENT = "payment_link_sent"
        PAID = "paid"
        FULFILLED = "fulfilled"
        CANCELLED = "cancelled"

    class PaymentStatus(models.TextChoices):
        UNPAID = "unpaid"
        PAID = "paid"
        PARTIALLY_REFUNDED = "partially_refunded"
        REFUNDED = "refunded"

    public_id = models.CharField(max_length=32, unique=True, default=new_public_id, editable=False)
    order_number = models.PositiveIntegerField(unique=True, null=True, blank=True, editable=False)
    status = models.CharField(max_length=32, choices=Status.choices, default=Status.PENDING_PAYMENT)
    payment_status = models.CharField(max_length=32, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID)
    customer = models.ForeignKey(Customer, null=True, blank=True, on_delete=models.SET_NULL, related_name="orders")

    # contact + shipping address snapshot
    first_name = models.CharField(max_length=120)
    last_name = models.CharField(max_length=120)
    email = models.EmailField()
    phone = models.CharField(max_length=40, blank=True, default="")
    address1 = models.CharField(max_length=255)
    address2 = models.CharField(max_length=255, blank=True, default="")
    postal_code = models.CharField(max_length=20)
    city = models.CharField(max_length=120)
    country = models.CharField(max_length=64)
    preferred_payment_method = models.CharField(max_length=32, blank=True, default="")

    subtotal_cents = models.PositiveIntegerField(default=0)
    shipping_cents = models.PositiveIntegerField(default=0)
    discount_cents = models.PositiveIntegerField(default=0)
    total_cents = models.PositiveIntegerField(default=0)
    refunded_cents = models.PositiveIntegerField(default=0)

    discount_code = models.ForeignKey(
        "discounts.DiscountCode", null=True, blank=True, on_delete=models.SET_NULL, related_name="orders"
    )
    shipping_option = models.ForeignKey(
        "shipping.ShippingOption", null=True, blank=True, on_delete=models.SET_NULL, related_name="orders"
    )
    shipping_option_title = models.CharField(max_length=200, blank=True, default="")
    shipping_option_carrier = models.CharField(max_length=120, blank=True, default="")
    shipping_option_type = models.CharField(max_length=32, blank=True, default="")
    service_point_id = models.CharField(max_length=64, blank=True, default="")
    service_point_name = models.CharField(max_length=200, blank=True, default="")
    service_point_street = models.CharField(max_length=200, blank=True, default="")
    service_point_house_number = models.CharField(max_length=32, blank=True, default="")
    service_point_postal_code = models.CharField(max_length=20, blank=True, default="")
    service_point_city = models.CharField(max_length=120, blank=True, default="")
    service_point_distance = models.FloatField(null=True, blank=True)

    stripe_payment_intent_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    stripe_charge_id = models.CharField(max_length=255, null=True, blank=True)
    stripe_risk_level = models.CharField(max_length=32, null=True, blank=True)
    stripe_risk_score = models.IntegerField(null=True, blank=True)
    stripe_outcome_type = models.CharField(max_length=64, null=True, blank=True)
    stripe_seller_message = models.TextField(null=True, blank=True)
    paypal_order_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    paypal_capture_id = models.CharField(max_length=255, null=True, blank=True)

    sendcloud_shipment_id = models.CharField(max_length=255, null=True, blank=True)
    sendcloud_parcel_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    sendcloud_tracking_number = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    sendcloud_tracking_url = models.URLField(max_length=500, null=True, blank=True)
    shipping_label_url = models.URLField(max_length=500, null=True, blank=True)
    delivery_status = models.CharField(max_length=120, null=True, blank=True)

    tags = models.ManyToManyField(OrderTag, blank=True, related_name="orders")
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(total_cents=F("subtotal_cents") + F("shipping_cents") - F("discount_cents")),
                name="orders_total_matches_parts",
            ),
            models.CheckConstraint(
                condition=Q(refunded_cents__lte=F("total_cents")),
                name="orders_refund_within_total",
            ),
        ]

    def __str__(self):
        return self.public_id

    @property
    def refundable_cents(self) -> int:
        return max(self.total_cents - self.refunded_cents, 0)


class OrderItem(models.Model):
    """A purchased line; title and price are frozen at checkout time."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "catalog.Product", null=True, blank=True, on_delete=models.SET_NULL, related_name="order_items"
    )
    title_snapshot = models.CharField(max_length=255)
    unit_price_cents_snapshot = models.PositiveIntegerField()
    qty = models.PositiveIntegerField()

    class Meta:
        db_table = "order_items"

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents_snapshot * self.qty
